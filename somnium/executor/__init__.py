"""Action execution module.

Runs typed world-mutating actions and holds the scheduled-action queue.
"""

from somnium.executor.action_executor import (
    ActionExecutor,
    ActionOutcome,
    ExecutionReport,
    ProgressionTarget,
)
from somnium.executor.scheduler import ActionScheduler, ScheduledAction

__all__ = [
    "ActionExecutor",
    "ActionOutcome",
    "ActionScheduler",
    "ExecutionReport",
    "ProgressionTarget",
    "ScheduledAction",
]
