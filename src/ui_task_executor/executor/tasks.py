"""Task kinds, task specs and the mutable task record driven by the executor.

A task spec is what callers hand to :class:`~ui_task_executor.executor.engine.Executor`.
It carries static metadata plus an async executor callable. The executor turns
each spec into an :class:`ExecutionTask`, which is the record the run loop
mutates in place.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from .state_machine import TaskStatus, transition_task


class TaskType(str, Enum):
    INSIGHT = "Insight"
    ACTION = "Action"


class InsightSubType(str, Enum):
    FIND = "find"
    EXTRACT = "extract"
    ASSERT = "assert"


@dataclass(frozen=True, slots=True)
class TaskResult:
    """What an executor returns on success.

    `log` is free-form and typically embeds a perception dump for the report.
    """

    output: Any = None
    log: Any = None


@dataclass(slots=True)
class ExecutionContext:
    """Context handed to an executor alongside its param.

    `task` is the live record being executed. Action tasks additionally get
    the task that ran right before them and the element it resolved.
    """

    task: ExecutionTask
    element: Any = None
    previous: ExecutionTask | None = None


# Executors return a TaskResult, None, or a plain {"output": ..., "log": ...} mapping.
TaskExecutorFn = Callable[[Any, ExecutionContext], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class InsightTaskSpec:
    """A perception query, e.g. locating an element."""

    type: ClassVar[TaskType] = TaskType.INSIGHT

    sub_type: InsightSubType | str
    param: Any
    executor: TaskExecutorFn


@dataclass(frozen=True, slots=True)
class ActionTaskSpec:
    """An interaction with the UI, e.g. a tap or an input."""

    type: ClassVar[TaskType] = TaskType.ACTION

    param: Any
    executor: TaskExecutorFn
    sub_type: str | None = None


TaskSpec = InsightTaskSpec | ActionTaskSpec


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(slots=True)
class TaskTiming:
    """Epoch-millisecond timestamps for a task's RUNNING window."""

    start: int
    end: int | None = None
    cost: int | None = None

    def finish(self) -> None:
        self.end = _now_ms()
        self.cost = self.end - self.start


@dataclass(slots=True)
class ExecutionTask:
    """A task record owned by a run.

    Only the run loop moves a task out of PENDING. `output` and `error` are
    mutually exclusive and written once, at the terminal transition.
    """

    type: TaskType
    param: Any
    executor: TaskExecutorFn = field(repr=False)
    sub_type: str | None = None
    status: TaskStatus = TaskStatus.PENDING
    output: Any = None
    log: Any = None
    error: BaseException | None = None
    timing: TaskTiming | None = None

    @classmethod
    def from_spec(cls, spec: TaskSpec) -> ExecutionTask:
        sub_type = spec.sub_type
        if isinstance(sub_type, Enum):
            sub_type = sub_type.value
        if spec.type is TaskType.INSIGHT and not sub_type:
            raise ValueError("Insight tasks require a sub_type")
        return cls(type=spec.type, sub_type=sub_type, param=spec.param, executor=spec.executor)

    def mark_running(self) -> None:
        self.status = transition_task(current=self.status, to=TaskStatus.RUNNING)
        self.timing = TaskTiming(start=_now_ms())

    def mark_success(self, result: TaskResult | None) -> None:
        self.status = transition_task(current=self.status, to=TaskStatus.SUCCESS)
        if result is not None:
            self.output = result.output
            self.log = result.log
        if self.timing is not None:
            self.timing.finish()

    def mark_fail(self, error: BaseException) -> None:
        self.status = transition_task(current=self.status, to=TaskStatus.FAIL)
        self.error = error
        if self.timing is not None:
            self.timing.finish()

    def mark_cancelled(self) -> None:
        self.status = transition_task(current=self.status, to=TaskStatus.CANCELLED)


def element_of(output: Any) -> Any:
    """Return the `element` carried by a task output, if any."""

    if output is None:
        return None
    if isinstance(output, Mapping):
        return output.get("element")
    return getattr(output, "element", None)


_RESULT_KEYS = frozenset({"output", "log"})


def as_task_result(value: Any) -> TaskResult | None:
    """Normalise what an executor returned.

    Accepts a :class:`TaskResult`, None, or a mapping whose keys are a subset
    of `output` / `log`. Anything else raises TypeError.
    """

    if value is None or isinstance(value, TaskResult):
        return value
    if isinstance(value, Mapping) and set(value) <= _RESULT_KEYS:
        return TaskResult(output=value.get("output"), log=value.get("log"))
    raise TypeError(
        f"Executor returned {type(value).__name__}, "
        "expected TaskResult, None or a mapping of output/log"
    )
