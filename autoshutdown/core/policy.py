from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SchedulePolicy:
    """How the pre-announce and the shutdown request relate.

    ``combined``: the pre-announce task issues the shutdown request with the
    announced lead time, a late pre-announce is collapsed to fire right away,
    and a shutdown less than ten seconds away is pushed to the next day.

    ``split``: the shutdown request is its own task, a late pre-announce is
    skipped, and there is no quick-restart guard.
    """

    name: str
    quick_restart_guard: bool
    announce_requests_shutdown: bool
    collapse_late_announce: bool


COMBINED = SchedulePolicy(
    name="combined",
    quick_restart_guard=True,
    announce_requests_shutdown=True,
    collapse_late_announce=True,
)
SPLIT = SchedulePolicy(
    name="split",
    quick_restart_guard=False,
    announce_requests_shutdown=False,
    collapse_late_announce=False,
)

POLICIES = {policy.name: policy for policy in (COMBINED, SPLIT)}
