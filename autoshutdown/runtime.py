"""Thread-safe runtime counters for the heart loop."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass
class HeartRuntimeState:
    started_at: datetime = field(default_factory=_now)
    last_tick_at: datetime | None = None
    tick_count: int = 0
    reload_count: int = 0
    last_signal: dict[str, object | None] = field(
        default_factory=lambda: {"type": None, "ts": None, "source": None}
    )
    _lock: Lock = field(default_factory=Lock, repr=False)

    def update_tick(self) -> None:
        with self._lock:
            self.last_tick_at = _now()
            self.tick_count += 1

    def update_reload(self) -> None:
        with self._lock:
            self.reload_count += 1

    def update_signal(self, signal_type: str | None, source: str | None) -> None:
        with self._lock:
            self.last_signal = {
                "type": signal_type,
                "ts": _now().isoformat(),
                "source": source,
            }

    def snapshot(self) -> dict[str, object]:
        with self._lock:
            uptime_seconds = (_now() - self.started_at).total_seconds()
            return {
                "started_at": self.started_at.isoformat(),
                "last_tick_at": self.last_tick_at.isoformat() if self.last_tick_at else None,
                "tick_count": self.tick_count,
                "reload_count": self.reload_count,
                "last_signal": dict(self.last_signal),
                "uptime_seconds": uptime_seconds,
            }
