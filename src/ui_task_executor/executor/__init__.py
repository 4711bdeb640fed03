"""Task execution domain.

This package introduces first-class types for:
- Task specs (Insight perception queries, Action interactions)
- The mutable task record and its status machine
- The ordered run loop (:class:`Executor`)
- Serializable run dumps for reporting
"""

from ui_task_executor.executor.dump import (
    GroupedRunDump,
    LiveHandle,
    RunDump,
    TaskDump,
    redact_live_handles,
    stringify_dump,
)
from ui_task_executor.executor.engine import Executor
from ui_task_executor.executor.state_machine import (
    ExecutorStateError,
    IllegalTransitionError,
    RunStatus,
    TaskStatus,
)
from ui_task_executor.executor.tasks import (
    ActionTaskSpec,
    ExecutionContext,
    ExecutionTask,
    InsightSubType,
    InsightTaskSpec,
    TaskResult,
    TaskSpec,
    TaskType,
)

__all__ = [
    "ActionTaskSpec",
    "ExecutionContext",
    "ExecutionTask",
    "Executor",
    "ExecutorStateError",
    "GroupedRunDump",
    "IllegalTransitionError",
    "InsightSubType",
    "InsightTaskSpec",
    "LiveHandle",
    "RunDump",
    "RunStatus",
    "TaskDump",
    "TaskResult",
    "TaskSpec",
    "TaskStatus",
    "TaskType",
    "redact_live_handles",
    "stringify_dump",
]
