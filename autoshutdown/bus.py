"""In-memory control signal bus for the heart loop."""

import uuid
from dataclasses import dataclass, field
from queue import Empty, Queue
from typing import Optional


@dataclass
class Signal:
    type: str
    payload: dict[str, object] = field(default_factory=dict)
    source: str | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


class Bus:
    """Producers call `emit()`; the heart calls `get()` between ticks."""

    def __init__(self) -> None:
        self._q: Queue[Signal] = Queue()

    def emit(self, signal: Signal) -> None:
        self._q.put(signal)

    def get(self, timeout: Optional[float] = None) -> Optional[Signal]:
        """Return the next signal, blocking up to `timeout` seconds.

        Returns None when the timeout expires.
        """
        try:
            return self._q.get(timeout=timeout)
        except Empty:
            return None
