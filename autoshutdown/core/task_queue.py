"""One-shot timer tasks advanced by elapsed-time ticks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from autoshutdown.observability.log_manager import get_component_logger

logger = get_component_logger("core.task_queue")

TaskAction = Callable[[], None]


@dataclass
class ScheduledTask:
    name: str
    remaining_ms: int
    action: TaskAction


class TaskQueue:
    """Ordered list of pending one-shot tasks.

    Nothing runs in the background: tasks fire only inside ``advance`` on the
    caller's thread, in the order they were scheduled.
    """

    def __init__(self) -> None:
        self._tasks: list[ScheduledTask] = []
        self._generation = 0

    def __len__(self) -> int:
        return len(self._tasks)

    def pending(self) -> list[ScheduledTask]:
        return list(self._tasks)

    def schedule_once(self, delay_seconds: float, action: TaskAction, *, name: str = "task") -> ScheduledTask:
        task = ScheduledTask(
            name=name,
            remaining_ms=max(0, int(round(delay_seconds * 1000))),
            action=action,
        )
        self._tasks.append(task)
        return task

    def cancel_all(self) -> int:
        cancelled = len(self._tasks)
        self._tasks.clear()
        self._generation += 1
        return cancelled

    def advance(self, elapsed_ms: int) -> int:
        """Age every task by ``elapsed_ms`` and fire the ones that are due.

        Returns the number of tasks fired. A task that raises is logged and
        the rest of the batch still fires, unless an action cleared the queue.
        """
        if elapsed_ms <= 0 or not self._tasks:
            return 0
        due: list[ScheduledTask] = []
        waiting: list[ScheduledTask] = []
        for task in self._tasks:
            task.remaining_ms -= elapsed_ms
            (due if task.remaining_ms <= 0 else waiting).append(task)
        self._tasks = waiting

        generation = self._generation
        fired = 0
        for task in due:
            if self._generation != generation:
                break
            fired += 1
            try:
                task.action()
            except Exception as exc:
                logger.exception(
                    "Scheduled task failed event=task_queue.task_failed task=%s",
                    task.name,
                    exc_info=exc,
                )
        return fired
