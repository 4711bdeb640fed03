"""Serializable snapshots of a run.

Dumps are what the report renderer consumes. Values inside `param`, `output`
and `log` are copied into plain JSON structures; anything that declares
itself a live resource handle (a page, a browser session) is replaced with a
placeholder string so dumps stay safe to persist.
"""

from __future__ import annotations

import dataclasses
import traceback
from collections.abc import Mapping
from enum import Enum
from pathlib import PurePath
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .state_machine import RunStatus, TaskStatus
from .tasks import ExecutionTask, TaskType


@runtime_checkable
class LiveHandle(Protocol):
    """A live, non-serializable resource (page, browser, device session)."""

    def live_handle_label(self) -> str: ...


def redact_live_handles(value: Any) -> Any:
    """Deep-copy `value` into JSON-safe data, redacting live handles."""

    if isinstance(value, LiveHandle):
        return f"[{value.live_handle_label()} object]"
    if isinstance(value, Enum):
        return redact_live_handles(value.value)
    if value is None or isinstance(value, bool | int | float | str):
        return value
    if isinstance(value, PurePath):
        return str(value)
    if isinstance(value, BaseModel):
        return {k: redact_live_handles(getattr(value, k)) for k in type(value).model_fields}
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: redact_live_handles(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Mapping):
        return {str(k): redact_live_handles(v) for k, v in value.items()}
    if isinstance(value, list | tuple | set | frozenset):
        return [redact_live_handles(v) for v in value]
    return repr(value)


class _DumpModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TimingDump(_DumpModel):
    start: int
    end: int | None = None
    cost: int | None = None


class TaskDump(_DumpModel):
    type: TaskType
    sub_type: str | None = None
    param: Any = None
    status: TaskStatus
    output: Any = None
    log: Any = None
    error: str | None = None
    error_stack: str | None = None
    timing: TimingDump | None = None

    @classmethod
    def from_task(cls, task: ExecutionTask) -> TaskDump:
        error: str | None = None
        error_stack: str | None = None
        if task.error is not None:
            error = str(task.error) or type(task.error).__name__
            error_stack = "".join(traceback.format_exception(task.error))

        timing = None
        if task.timing is not None:
            timing = TimingDump(
                start=task.timing.start, end=task.timing.end, cost=task.timing.cost
            )

        return cls(
            type=task.type,
            sub_type=task.sub_type,
            param=redact_live_handles(task.param),
            status=task.status,
            output=redact_live_handles(task.output),
            log=redact_live_handles(task.log),
            error=error,
            error_stack=error_stack,
            timing=timing,
        )


class RunDump(_DumpModel):
    id: str
    description: str | None = None
    status: RunStatus
    log_time: int
    sdk_version: str | None = None
    tasks: list[TaskDump] = Field(default_factory=list)


class GroupedRunDump(_DumpModel):
    """Several runs rendered together, e.g. all runs of one test file."""

    group_name: str
    group_description: str | None = None
    executions: list[RunDump] = Field(default_factory=list)


def stringify_dump(dump: BaseModel, indent: int | None = None) -> str:
    return dump.model_dump_json(by_alias=True, exclude_none=True, indent=indent)
