"""Daily scheduled shutdown with a pre-announce broadcast."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable
from zoneinfo import ZoneInfoNotFoundError

from autoshutdown.config.settings import (
    DEFAULT_PRE_ANNOUNCE_MESSAGE,
    ShutdownConfig,
    load_shutdown_config,
)
from autoshutdown.core.clock import (
    DAY_SECONDS,
    format_duration,
    format_instant,
    next_occurrence,
    parse_time_of_day,
    resolve_tzinfo,
)
from autoshutdown.core.errors import AutoShutdownError, ConfigOutOfBounds
from autoshutdown.core.policy import SchedulePolicy
from autoshutdown.core.task_queue import TaskQueue
from autoshutdown.observability.log_manager import get_component_logger
from autoshutdown.world import World

logger = get_component_logger("services.auto_shutdown")

QUICK_RESTART_GUARD_SECONDS = 10
FALLBACK_PRE_ANNOUNCE_SECONDS = 3600

PRE_ANNOUNCE_TASK = "pre_announce"
SHUTDOWN_TASK = "shutdown"


class SchedulerState(str, Enum):
    DISABLED = "disabled"
    ARMED = "armed"


@dataclass(frozen=True)
class ShutdownPlan:
    now: int
    shutdown_at: int
    pre_announce_at: int | None
    announce_lead_seconds: int
    policy: SchedulePolicy

    @property
    def diff_to_shutdown(self) -> int:
        return self.shutdown_at - self.now

    @property
    def diff_to_pre_announce(self) -> int | None:
        if self.pre_announce_at is None:
            return None
        return self.pre_announce_at - self.now


class ServerAutoShutdown:
    """Arms a daily shutdown and its pre-announce on a tick-driven task queue.

    ``initialize`` is called at startup and on every configuration reload;
    ``tick`` is called once per host update with the elapsed milliseconds.
    Neither raises: problems are reported through the component logger.
    """

    def __init__(
        self,
        *,
        world: World,
        config_loader: Callable[[], ShutdownConfig] = load_shutdown_config,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.world = world
        self._config_loader = config_loader
        self._clock = clock
        self._queue = TaskQueue()
        self.state = SchedulerState.DISABLED
        self.plan: ShutdownPlan | None = None

    @property
    def enabled(self) -> bool:
        return self.state is SchedulerState.ARMED

    def pending_tasks(self) -> list[str]:
        return [task.name for task in self._queue.pending()]

    def initialize(
        self,
        config: ShutdownConfig | None = None,
        now: float | None = None,
    ) -> ShutdownPlan | None:
        cancelled = self._queue.cancel_all()
        if cancelled:
            logger.info("Cancelled pending tasks event=auto_shutdown.cancelled count=%s", cancelled)
        self.state = SchedulerState.DISABLED
        self.plan = None

        cfg = config if config is not None else self._config_loader()
        if not cfg.enabled:
            logger.info("Module disabled event=auto_shutdown.disabled")
            return None

        try:
            target = parse_time_of_day(cfg.time_of_day)
            zone = resolve_tzinfo(cfg.timezone)
        except (AutoShutdownError, ZoneInfoNotFoundError, ValueError) as exc:
            logger.error(
                "Incorrect time in config option 'ServerAutoShutdown.Time': %s",
                exc,
                extra={
                    "event": "auto_shutdown.config_error",
                    "status": "disabled",
                    "error_code": type(exc).__name__,
                    "value": cfg.time_of_day,
                    "timezone": cfg.timezone,
                },
            )
            return None

        current = int(now if now is not None else self._clock())
        policy = cfg.policy
        shutdown_at = next_occurrence(current, target.hour, target.minute, target.second, zone)
        if policy.quick_restart_guard and shutdown_at - current < QUICK_RESTART_GUARD_SECONDS:
            logger.info(
                "Next shutdown is under %s seconds away, moving it to the next day event=auto_shutdown.quick_restart_guard",
                QUICK_RESTART_GUARD_SECONDS,
            )
            shutdown_at += DAY_SECONDS
        diff_to_shutdown = shutdown_at - current

        lead = cfg.pre_announce_seconds
        if lead > DAY_SECONDS:
            bound = ConfigOutOfBounds(
                key="ServerAutoShutdown.PreAnnounce.Seconds",
                configured=lead,
                applied=FALLBACK_PRE_ANNOUNCE_SECONDS,
            )
            logger.warning(
                "Pre-announce lead time is longer than one day, using %s seconds",
                bound.applied,
                extra={
                    "event": "auto_shutdown.config_out_of_bounds",
                    "key": bound.key,
                    "configured": bound.configured,
                    "applied": bound.applied,
                },
            )
            lead = bound.applied

        pre_announce_at: int | None = shutdown_at - lead
        if diff_to_shutdown < lead:
            if policy.collapse_late_announce:
                pre_announce_at = current + 1
                lead = diff_to_shutdown
            else:
                pre_announce_at = None
                logger.info(
                    "Pre-announce time already passed, skipping it event=auto_shutdown.pre_announce_skipped lead_seconds=%s",
                    lead,
                )

        # Clears a host countdown armed by an earlier schedule.
        self.world.cancel_pending_shutdown()

        template = _checked_template(cfg.pre_announce_message)
        if pre_announce_at is not None:
            self._queue.schedule_once(
                pre_announce_at - current,
                self._announce_action(template, lead, policy, cfg.exit_code),
                name=PRE_ANNOUNCE_TASK,
            )
        if not policy.announce_requests_shutdown:
            self._queue.schedule_once(
                diff_to_shutdown,
                self._shutdown_action(cfg.shutdown_delay_seconds, cfg.exit_code),
                name=SHUTDOWN_TASK,
            )

        self.plan = ShutdownPlan(
            now=current,
            shutdown_at=shutdown_at,
            pre_announce_at=pre_announce_at,
            announce_lead_seconds=lead,
            policy=policy,
        )
        self.state = SchedulerState.ARMED
        self._log_plan(self.plan, zone)
        return self.plan

    def tick(self, elapsed_ms: int) -> int:
        if self.state is not SchedulerState.ARMED:
            return 0
        return self._queue.advance(elapsed_ms)

    def _announce_action(
        self,
        template: str,
        lead: int,
        policy: SchedulePolicy,
        exit_code: int,
    ) -> Callable[[], None]:
        def _announce() -> None:
            message = template % (format_duration(lead),)
            logger.info("> %s", message, extra={"event": "auto_shutdown.pre_announce"})
            self.world.broadcast(message)
            if policy.announce_requests_shutdown:
                self.world.request_shutdown(lead, exit_code)

        return _announce

    def _shutdown_action(self, delay_seconds: int, exit_code: int) -> Callable[[], None]:
        def _shutdown() -> None:
            logger.info(
                "Requesting shutdown event=auto_shutdown.shutdown delay_seconds=%s exit_code=%s",
                delay_seconds,
                exit_code,
            )
            self.world.request_shutdown(delay_seconds, exit_code)

        return _shutdown

    @staticmethod
    def _log_plan(plan: ShutdownPlan, zone) -> None:
        logger.info(
            "Next time to shutdown - %s, remaining %s",
            format_instant(plan.shutdown_at, zone),
            format_duration(plan.diff_to_shutdown),
            extra={
                "event": "auto_shutdown.armed",
                "status": "armed",
                "policy": plan.policy.name,
                "shutdown_at": plan.shutdown_at,
            },
        )
        if plan.pre_announce_at is not None:
            logger.info(
                "Next time to pre-announce - %s, remaining %s",
                format_instant(plan.pre_announce_at, zone),
                format_duration(plan.diff_to_pre_announce or 0),
                extra={
                    "event": "auto_shutdown.pre_announce_armed",
                    "pre_announce_at": plan.pre_announce_at,
                    "lead_seconds": plan.announce_lead_seconds,
                },
            )


def _checked_template(template: str) -> str:
    try:
        template % ("",)
    except (TypeError, ValueError):
        logger.warning(
            "Pre-announce message needs exactly one %s slot, using the default",
            extra={"event": "auto_shutdown.bad_template", "template": template},
        )
        return DEFAULT_PRE_ANNOUNCE_MESSAGE
    return template
