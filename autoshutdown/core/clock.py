"""Time-of-day arithmetic for the daily shutdown schedule."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo

from dateutil import tz

from autoshutdown.core.errors import ConfigParseError, ConfigRangeError

DAY_SECONDS = 86400

_TIME_PATTERN = re.compile(r"([0-9]{2}):([0-9]{2}):([0-9]{2})")
_DURATION_UNITS = (
    ("day", DAY_SECONDS),
    ("hour", 3600),
    ("minute", 60),
    ("second", 1),
)


@dataclass(frozen=True)
class TimeOfDay:
    hour: int
    minute: int
    second: int

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}:{self.second:02d}"


def parse_time_of_day(text: str) -> TimeOfDay:
    """Parse a strict ``HH:MM:SS`` string.

    Raises ConfigParseError when the shape is wrong and ConfigRangeError when
    a field is out of bounds.
    """
    raw = str(text or "").strip()
    match = _TIME_PATTERN.fullmatch(raw)
    if match is None:
        raise ConfigParseError(raw)
    hour, minute, second = (int(part) for part in match.groups())
    if hour > 23:
        raise ConfigRangeError("hour", raw, 23)
    if minute > 59:
        raise ConfigRangeError("minute", raw, 59)
    if second > 59:
        raise ConfigRangeError("second", raw, 59)
    return TimeOfDay(hour=hour, minute=minute, second=second)


def resolve_tzinfo(timezone_name: str | None = None) -> tzinfo:
    if timezone_name:
        return ZoneInfo(timezone_name)
    return tz.tzlocal()


def next_occurrence(
    now: float,
    hour: int,
    minute: int,
    second: int,
    tzinfo: tzinfo | None = None,
) -> int:
    """Return the first epoch second strictly after ``now`` at the given local time.

    The wall-clock fields of ``now`` are overwritten and converted back, so
    DST shifts come from the zone rules. A time inside a spring-forward gap
    is moved past the gap.
    """
    zone = tzinfo or tz.tzlocal()
    local_now = datetime.fromtimestamp(now, tz=zone)
    candidate = local_now.replace(hour=hour, minute=minute, second=second, microsecond=0)
    instant = _local_timestamp(candidate)
    if instant > now:
        return instant
    instant += DAY_SECONDS
    if instant > now:
        return instant
    # Still behind on a 25 hour day: take the wall-clock time of the next date.
    tomorrow = datetime.combine(
        local_now.date() + timedelta(days=1),
        time(hour, minute, second),
        tzinfo=zone,
    )
    return _local_timestamp(tomorrow)


def _local_timestamp(local: datetime) -> int:
    return int(tz.resolve_imaginary(local).timestamp())


def format_duration(seconds: float) -> str:
    remaining = max(0, int(seconds))
    parts: list[str] = []
    for name, size in _DURATION_UNITS:
        count, remaining = divmod(remaining, size)
        if count:
            parts.append(f"{count} {name}{'' if count == 1 else 's'}")
    return " ".join(parts) or "0 seconds"


def format_instant(epoch: float, tzinfo: tzinfo | None = None) -> str:
    local = datetime.fromtimestamp(epoch, tz=tzinfo or tz.tzlocal())
    return local.strftime("%Y-%m-%d %H:%M:%S %Z").strip()
