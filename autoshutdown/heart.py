"""Heartbeat loop that feeds elapsed-time ticks to the shutdown scheduler."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from autoshutdown.bus import Bus
from autoshutdown.observability.log_manager import get_component_logger
from autoshutdown.runtime import HeartRuntimeState
from autoshutdown.services.auto_shutdown import ServerAutoShutdown
from autoshutdown.world import ConsoleWorld

SHUTDOWN = "SHUTDOWN"
RUNNING = "RUNNING"
RELOAD = "reload"

logger = get_component_logger("heart")


@dataclass
class HeartConfig:
    tick_seconds: float = 0.1


class Heart:
    def __init__(
        self,
        config: HeartConfig | None = None,
        *,
        bus: Bus,
        world: ConsoleWorld,
        auto_shutdown: ServerAutoShutdown,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or HeartConfig()
        self.bus = bus
        self.world = world
        self.auto_shutdown = auto_shutdown
        self.signal = RUNNING
        self.runtime = HeartRuntimeState()
        self._monotonic = monotonic
        self._last_tick: float | None = None

    def run(self) -> int:
        """Run until the world exits or a SHUTDOWN signal arrives.

        The heart blocks on the bus for at most one tick interval. Control
        signals are handled on this thread, so a reload never races a tick.
        Returns the exit code for the process.
        """
        self.auto_shutdown.initialize()
        self._last_tick = self._monotonic()
        while self.signal != SHUTDOWN:
            signal = self.bus.get(timeout=self.config.tick_seconds)
            if signal is not None:
                self.runtime.update_signal(signal.type, signal.source)
                if signal.type == SHUTDOWN:
                    break
                if signal.type == RELOAD:
                    self.reload()
            self.tick()
            if self.world.exit_code is not None:
                break
        logger.info("Heart stopped event=heart.stopped", extra=self.runtime.snapshot())
        return self.world.exit_code or 0

    def tick(self) -> None:
        now = self._monotonic()
        last = self._last_tick if self._last_tick is not None else now
        self._last_tick = now
        elapsed_ms = int((now - last) * 1000)
        self.runtime.update_tick()
        # A countdown armed by this tick starts with its full delay.
        self.world.update(elapsed_ms)
        self.auto_shutdown.tick(elapsed_ms)

    def reload(self) -> None:
        logger.info("Reloading configuration event=heart.reload")
        self.runtime.update_reload()
        self.auto_shutdown.initialize()

    def stop(self) -> None:
        self.signal = SHUTDOWN
