"""Host-side collaborators the shutdown scheduler talks to."""

from __future__ import annotations

from typing import Callable, Protocol

from autoshutdown.core.clock import format_duration
from autoshutdown.observability.log_manager import get_component_logger

logger = get_component_logger("world")


class World(Protocol):
    def broadcast(self, message: str) -> None: ...

    def request_shutdown(self, delay_seconds: int, exit_code: int) -> None: ...

    def cancel_pending_shutdown(self) -> None: ...


class ConsoleWorld:
    """Stand-in host that prints broadcasts and counts down shutdown requests.

    The countdown advances through ``update`` from the same heartbeat that
    ticks the scheduler. When it runs out, ``exit_code`` is set and the
    owner is expected to stop.
    """

    def __init__(self, *, output: Callable[[str], None] = print) -> None:
        self._output = output
        self._remaining_ms: int | None = None
        self._pending_exit_code = 0
        self.exit_code: int | None = None

    @property
    def shutdown_pending(self) -> bool:
        return self._remaining_ms is not None

    @property
    def remaining_ms(self) -> int | None:
        return self._remaining_ms

    def broadcast(self, message: str) -> None:
        logger.info("Broadcast event=world.broadcast")
        self._output(message)

    def request_shutdown(self, delay_seconds: int, exit_code: int) -> None:
        self._remaining_ms = max(0, int(delay_seconds)) * 1000
        self._pending_exit_code = int(exit_code)
        logger.info(
            "Shutdown requested event=world.shutdown_requested delay_seconds=%s exit_code=%s",
            delay_seconds,
            exit_code,
        )
        self._output(f"Server shutdown in {format_duration(delay_seconds)}")
        if self._remaining_ms == 0:
            self._finish()

    def cancel_pending_shutdown(self) -> None:
        if self._remaining_ms is None:
            return
        self._remaining_ms = None
        logger.info("Pending shutdown cancelled event=world.shutdown_cancelled")
        self._output("Server shutdown cancelled")

    def update(self, elapsed_ms: int) -> None:
        if self._remaining_ms is None or elapsed_ms <= 0:
            return
        self._remaining_ms -= elapsed_ms
        if self._remaining_ms <= 0:
            self._finish()

    def _finish(self) -> None:
        self._remaining_ms = None
        self.exit_code = self._pending_exit_code
        logger.info("Shutting down event=world.exit exit_code=%s", self.exit_code)
