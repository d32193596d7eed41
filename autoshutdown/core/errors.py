"""Configuration errors raised while arming the shutdown schedule."""

from __future__ import annotations

from dataclasses import dataclass


class AutoShutdownError(Exception):
    """Base error for the auto shutdown module."""


class ConfigParseError(AutoShutdownError):
    """The configured time-of-day is not a well-formed HH:MM:SS string."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Incorrect time '{value}', expected HH:MM:SS")
        self.value = value


class ConfigRangeError(AutoShutdownError):
    """One field of the configured time-of-day is out of bounds."""

    def __init__(self, field: str, value: str, limit: int) -> None:
        super().__init__(f"Incorrect {field} in time '{value}', must be 0-{limit}")
        self.field = field
        self.value = value
        self.limit = limit


@dataclass(frozen=True)
class ConfigOutOfBounds:
    """Recoverable: a value was clamped instead of rejected."""

    key: str
    configured: int
    applied: int
