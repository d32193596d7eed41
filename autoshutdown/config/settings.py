from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from autoshutdown.core.policy import COMBINED, POLICIES, SchedulePolicy
from autoshutdown.observability.log_manager import get_component_logger

logger = get_component_logger("config.settings")

KEY_PREFIX = "ServerAutoShutdown."
ENV_PREFIX = "SERVER_AUTO_SHUTDOWN_"

DEFAULT_ENABLED = False
DEFAULT_TIME = "04:00:00"
DEFAULT_PRE_ANNOUNCE_SECONDS = 3600
DEFAULT_PRE_ANNOUNCE_MESSAGE = "[SERVER]: Automated (quick) server restart in %s"
DEFAULT_SHUTDOWN_DELAY_SECONDS = 10
DEFAULT_EXIT_CODE = 0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class OptionStore(Protocol):
    def get(self, key: str) -> str | None: ...


class EnvConfigStore:
    """Options from environment variables.

    ``PreAnnounce.Seconds`` is read from ``SERVER_AUTO_SHUTDOWN_PREANNOUNCE_SECONDS``.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ

    @staticmethod
    def env_name(key: str) -> str:
        short = _short_key(key)
        return ENV_PREFIX + short.replace(".", "_").upper()

    def get(self, key: str) -> str | None:
        environ = self._environ if self._environ is not None else os.environ
        return environ.get(self.env_name(key))


class MemoryConfigStore:
    def __init__(self, values: Mapping[str, object] | None = None) -> None:
        self._values = {_short_key(k): v for k, v in (values or {}).items()}

    def get(self, key: str) -> str | None:
        value = self._values.get(_short_key(key))
        if value is None:
            return None
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)


@dataclass(frozen=True)
class ShutdownConfig:
    enabled: bool = DEFAULT_ENABLED
    time_of_day: str = DEFAULT_TIME
    pre_announce_seconds: int = DEFAULT_PRE_ANNOUNCE_SECONDS
    pre_announce_message: str = DEFAULT_PRE_ANNOUNCE_MESSAGE
    shutdown_delay_seconds: int = DEFAULT_SHUTDOWN_DELAY_SECONDS
    exit_code: int = DEFAULT_EXIT_CODE
    policy: SchedulePolicy = field(default=COMBINED)
    timezone: str | None = None


def load_shutdown_config(store: OptionStore | None = None) -> ShutdownConfig:
    """Read one immutable snapshot of the auto shutdown options."""
    source = store if store is not None else EnvConfigStore()
    pre_announce_key = "PreAnnounce.Seconds"
    if source.get(pre_announce_key) is None:
        pre_announce_key = "PreAnnounce.Delay"
    return ShutdownConfig(
        enabled=_get_bool(source, "Enabled", DEFAULT_ENABLED),
        time_of_day=_get_text(source, "Time", DEFAULT_TIME),
        pre_announce_seconds=_get_uint(source, pre_announce_key, DEFAULT_PRE_ANNOUNCE_SECONDS),
        pre_announce_message=_get_text(
            source, "PreAnnounce.Message", DEFAULT_PRE_ANNOUNCE_MESSAGE
        ),
        shutdown_delay_seconds=_get_uint(source, "Delay", DEFAULT_SHUTDOWN_DELAY_SECONDS),
        exit_code=_get_int(source, "ExitCode", DEFAULT_EXIT_CODE),
        policy=_get_policy(source),
        timezone=_get_timezone(source),
    )


def _short_key(key: str) -> str:
    if key.startswith(KEY_PREFIX):
        return key[len(KEY_PREFIX):]
    return key


def _get_text(source: OptionStore, key: str, default: str) -> str:
    configured = source.get(key)
    if isinstance(configured, str) and configured.strip():
        return configured.strip()
    return default


def _get_bool(source: OptionStore, key: str, default: bool) -> bool:
    configured = source.get(key)
    if configured is None:
        return default
    value = configured.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.warning("Invalid boolean option key=%s value=%s, using default=%s", key, configured, default)
    return default


def _get_int(source: OptionStore, key: str, default: int) -> int:
    configured = source.get(key)
    if configured is None:
        return default
    try:
        return int(configured.strip())
    except ValueError:
        logger.warning("Invalid integer option key=%s value=%s, using default=%s", key, configured, default)
        return default


def _get_uint(source: OptionStore, key: str, default: int) -> int:
    configured = source.get(key)
    if configured is None:
        return default
    try:
        value = int(configured.strip())
    except ValueError:
        value = -1
    if value < 0:
        logger.warning("Invalid unsigned option key=%s value=%s, using default=%s", key, configured, default)
        return default
    return value


def _get_policy(source: OptionStore) -> SchedulePolicy:
    configured = _get_text(source, "Policy", COMBINED.name).lower()
    policy = POLICIES.get(configured)
    if policy is None:
        logger.warning("Unknown schedule policy key=Policy value=%s, using default=%s", configured, COMBINED.name)
        return COMBINED
    return policy


def _get_timezone(source: OptionStore) -> str | None:
    configured = source.get("Timezone")
    tz_name = configured.strip() if isinstance(configured, str) else ""
    if not tz_name:
        return None
    try:
        ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone key=Timezone value=%s, using host local time", tz_name)
        return None
    return tz_name
