from __future__ import annotations

from enum import Enum


class RunStatus(str, Enum):
    INIT = "init"
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAIL = "fail"
    CANCELLED = "cancelled"


ALLOWED_RUN_TRANSITIONS: dict[RunStatus, set[RunStatus]] = {
    RunStatus.INIT: {RunStatus.PENDING},
    RunStatus.PENDING: {RunStatus.PENDING, RunStatus.RUNNING},
    # Appends while running keep the run in RUNNING.
    RunStatus.RUNNING: {RunStatus.RUNNING, RunStatus.COMPLETED, RunStatus.ERROR},
    RunStatus.COMPLETED: {RunStatus.PENDING},
    RunStatus.ERROR: {RunStatus.PENDING},
}

ALLOWED_TASK_TRANSITIONS: dict[TaskStatus, set[TaskStatus]] = {
    TaskStatus.PENDING: {TaskStatus.RUNNING, TaskStatus.CANCELLED},
    TaskStatus.RUNNING: {TaskStatus.SUCCESS, TaskStatus.FAIL},
    TaskStatus.SUCCESS: set(),
    TaskStatus.FAIL: set(),
    TaskStatus.CANCELLED: set(),
}


class IllegalTransitionError(ValueError):
    pass


class ExecutorStateError(RuntimeError):
    """Raised when an operation is not supported in the run's current status.

    Flushing a run that already ended in error is always rejected, so a stale
    run cannot be mistaken for a fresh one.
    """

    def __init__(self, operation: str, status: RunStatus) -> None:
        super().__init__(f"Cannot {operation} a run in status {status.value!r}")
        self.operation = operation
        self.status = status


def transition_run(*, current: RunStatus, to: RunStatus) -> RunStatus:
    allowed = ALLOWED_RUN_TRANSITIONS.get(current, set())
    if to not in allowed:
        raise IllegalTransitionError(f"Illegal run transition: {current.value} -> {to.value}")
    return to


def transition_task(*, current: TaskStatus, to: TaskStatus) -> TaskStatus:
    allowed = ALLOWED_TASK_TRANSITIONS.get(current, set())
    if to not in allowed:
        raise IllegalTransitionError(f"Illegal task transition: {current.value} -> {to.value}")
    return to
