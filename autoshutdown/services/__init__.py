from autoshutdown.services.auto_shutdown import (
    SchedulerState,
    ServerAutoShutdown,
    ShutdownPlan,
)

__all__ = ["SchedulerState", "ServerAutoShutdown", "ShutdownPlan"]
