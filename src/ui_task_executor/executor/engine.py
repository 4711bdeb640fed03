"""Ordered task execution engine.

An :class:`Executor` owns an append-only list of tasks and drives every
pending task to a terminal status, one at a time and in insertion order.
Tasks appended while a flush is in progress are picked up by that same flush.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable
from typing import Any

from ui_task_executor import __version__

from .dump import RunDump, TaskDump
from .state_machine import (
    ExecutorStateError,
    RunStatus,
    TaskStatus,
    transition_run,
)
from .tasks import (
    ExecutionContext,
    ExecutionTask,
    TaskSpec,
    TaskType,
    as_task_result,
    element_of,
)

logger = logging.getLogger(__name__)


class Executor:
    """Runs a sequence of Insight/Action tasks and records what happened.

    Status lifecycle::

        init --append--> pending --flush--> running --> completed | error
        running --append--> running
        completed | error --append--> pending

    Only one flush drives the task list at a time; a flush requested while
    another is in flight waits for that one instead of starting a second loop.
    """

    def __init__(
        self,
        id: str,  # noqa: A002
        description: str | None = None,
        tasks: Iterable[TaskSpec] | None = None,
        *,
        allow_resume_after_error: bool = True,
    ) -> None:
        """Initialize the executor.

        Args:
            id: Identifier of the run, used as the default dump file name.
            description: Optional human-readable description.
            tasks: Initial task specs, queued in order.
            allow_resume_after_error: Whether appending to an errored run re-opens it.
        """
        self.id = id
        self.description = description
        self.allow_resume_after_error = allow_resume_after_error

        self.tasks: list[ExecutionTask] = [ExecutionTask.from_spec(spec) for spec in tasks or ()]
        self.status: RunStatus = RunStatus.PENDING if self.tasks else RunStatus.INIT

        self._inflight: asyncio.Future[Any] | None = None

        logger.debug(
            "Executor created",
            extra={"run_id": self.id, "task_count": len(self.tasks)},
        )

    def _set_status(self, to: RunStatus) -> None:
        self.status = transition_run(current=self.status, to=to)

    def append(self, spec: TaskSpec) -> None:
        """Queue a task at the tail of the run.

        While a flush is running the new task is absorbed into that flush.
        Otherwise the run moves to PENDING and waits for the next flush.

        Raises:
            ExecutorStateError: If the run ended in error and resuming is disabled.
        """
        if self.status is RunStatus.ERROR and not self.allow_resume_after_error:
            raise ExecutorStateError("append to", self.status)

        task = ExecutionTask.from_spec(spec)
        self.tasks.append(task)

        if self.status is not RunStatus.RUNNING:
            self._set_status(RunStatus.PENDING)

        logger.debug(
            "Task appended",
            extra={
                "run_id": self.id,
                "task_index": len(self.tasks) - 1,
                "task_type": task.type.value,
                "status": self.status.value,
            },
        )

    async def flush(self) -> Any:
        """Run every pending task in order.

        Returns:
            The output of the last task if the run completed, otherwise None.

        Raises:
            ExecutorStateError: If the run already ended in error, or if an
                executor of this run calls `flush` on it while it is running.
        """
        if self._inflight is not None and not self._inflight.done():
            if asyncio.current_task() is self._inflight:
                # Waiting on the drive from inside it would never finish.
                raise ExecutorStateError("flush", self.status)
            return await self._await_inflight(self._inflight)

        if self.status is RunStatus.ERROR:
            raise ExecutorStateError("flush", self.status)
        if self.status is RunStatus.INIT:
            return None
        if self.status is RunStatus.COMPLETED:
            return self.tasks[-1].output

        # Status must read RUNNING before control returns to the caller's loop.
        self._set_status(RunStatus.RUNNING)
        inflight = asyncio.ensure_future(self._drive())
        # Registered before any waiter so it runs first once the drive is done.
        inflight.add_done_callback(self._clear_inflight)
        self._inflight = inflight
        return await self._await_inflight(inflight)

    def _clear_inflight(self, inflight: asyncio.Future[Any]) -> None:
        if self._inflight is inflight:
            self._inflight = None

    async def _await_inflight(self, inflight: asyncio.Future[Any]) -> Any:
        """Wait for the shared drive.

        Cancelling any waiter halts the run: the drive is cancelled, the running
        task fails and the rest are cancelled. The other waiters then see the
        halted run's result (None) instead of the cancellation.
        """
        try:
            return await asyncio.shield(inflight)
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if inflight.cancelled() and not (current and current.cancelling()):
                return None
            if not inflight.done():
                inflight.cancel()
                # Let the drive record the failure before the caller sees the cancel.
                await asyncio.wait([inflight])
            raise

    async def _drive(self) -> Any:
        logger.info("Flush started", extra={"run_id": self.id, "task_count": len(self.tasks)})

        index = 0
        # Re-read the length every iteration: appends during an await extend the list.
        while index < len(self.tasks):
            task = self.tasks[index]
            if task.status is not TaskStatus.PENDING:
                index += 1
                continue

            context = self._context_for(index)
            task.mark_running()
            logger.debug(
                "Task started",
                extra={"run_id": self.id, "task_index": index, "task_type": task.type.value},
            )

            try:
                result = as_task_result(await task.executor(task.param, context))
            except asyncio.CancelledError as e:
                self._fail(index, e)
                raise
            except Exception as e:
                self._fail(index, e)
                return None

            task.mark_success(result)
            logger.debug(
                "Task succeeded",
                extra={
                    "run_id": self.id,
                    "task_index": index,
                    "cost_ms": task.timing.cost if task.timing else None,
                },
            )
            index += 1

        self._set_status(RunStatus.COMPLETED)
        logger.info(
            "Flush completed",
            extra={"run_id": self.id, "status": self.status.value, "task_count": len(self.tasks)},
        )
        return self.tasks[-1].output

    def _context_for(self, index: int) -> ExecutionContext:
        task = self.tasks[index]
        if task.type is not TaskType.ACTION or index == 0:
            return ExecutionContext(task=task)
        previous = self.tasks[index - 1]
        return ExecutionContext(task=task, element=element_of(previous.output), previous=previous)

    def _fail(self, index: int, error: BaseException) -> None:
        self.tasks[index].mark_fail(error)

        cancelled = 0
        for task in self.tasks[index + 1 :]:
            if task.status is TaskStatus.PENDING:
                task.mark_cancelled()
                cancelled += 1

        self._set_status(RunStatus.ERROR)
        logger.warning(
            "Task failed; run halted",
            extra={
                "run_id": self.id,
                "task_index": index,
                "error": str(error) or type(error).__name__,
                "cancelled": cancelled,
            },
        )

    def dump(self) -> RunDump:
        """Return a point-in-time snapshot of the run.

        Read-only and safe to call while a flush is in progress.
        """
        return RunDump(
            id=self.id,
            description=self.description,
            status=self.status,
            log_time=int(time.time() * 1000),
            sdk_version=__version__,
            tasks=[TaskDump.from_task(task) for task in list(self.tasks)],
        )
