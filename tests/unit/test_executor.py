"""Unit tests for the ordered task execution engine."""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import AsyncMock, Mock

import pytest

from ui_task_executor.executor.engine import Executor
from ui_task_executor.executor.state_machine import ExecutorStateError, RunStatus, TaskStatus
from ui_task_executor.executor.tasks import ActionTaskSpec, TaskResult


def test_basic_run_passes_found_element_to_action(make_find_task) -> None:
    task_param = {"action": "tap", "anything": "acceptable"}
    tapper = AsyncMock(return_value=None)
    specs = [make_find_task(), ActionTaskSpec(param=task_param, executor=tapper)]

    executor = Executor("test", "hello, this is a test", specs)
    assert executor.status is RunStatus.PENDING

    asyncio.run(executor.flush())

    tasks = executor.tasks
    assert len(tasks) == len(specs)
    element = tasks[0].output["element"]
    assert element["content"] == "test"
    assert tasks[0].status is TaskStatus.SUCCESS
    assert tasks[0].log["dump"]["matched"] == [element]
    assert tasks[0].timing is not None and tasks[0].timing.end

    tapper.assert_awaited_once()
    param, context = tapper.await_args.args
    assert param is task_param
    assert context.element is element
    assert context.task is tasks[1]
    assert context.previous is tasks[0]

    assert executor.status is RunStatus.COMPLETED
    assert executor.dump().log_time


def test_init_then_append_while_running(make_find_task) -> None:
    executor = Executor("test")
    assert executor.status is RunStatus.INIT
    assert executor.tasks == []

    tapper = Mock()

    async def slow_tap(_param, _context) -> None:
        await asyncio.sleep(0.5)
        tapper()

    action = ActionTaskSpec(param={"action": "tap", "element": "previous"}, executor=slow_tap)

    executor.append(make_find_task())
    executor.append(action)
    assert executor.status is RunStatus.PENDING
    assert len(executor.tasks) == 2
    assert tapper.call_count == 0
    assert len(executor.dump().tasks) == 2

    async def append_later() -> None:
        assert executor.status is RunStatus.RUNNING
        await asyncio.sleep(0.2)
        executor.append(action)
        assert executor.status is RunStatus.RUNNING

    async def run() -> None:
        await asyncio.gather(executor.flush(), append_later())

    asyncio.run(run())

    assert executor.status is RunStatus.COMPLETED
    assert len(executor.tasks) == 3
    assert [t.status for t in executor.tasks] == [TaskStatus.SUCCESS] * 3
    assert tapper.call_count == 2

    # Appending after completion re-opens the run.
    executor.append(action)
    assert executor.status is RunStatus.PENDING
    assert len(executor.dump().tasks) == 4


def test_failure_cancels_remaining_tasks(make_find_task) -> None:
    follow_up = AsyncMock(return_value=None)
    executor = Executor(
        "test",
        "test-description",
        [
            make_find_task(should_fail=True),
            make_find_task(),
            ActionTaskSpec(param={}, executor=follow_up),
        ],
    )

    result = asyncio.run(executor.flush())

    failed, *rest = executor.tasks
    assert result is None
    assert failed.status is TaskStatus.FAIL
    assert isinstance(failed.error, RuntimeError)
    assert failed.output is None
    assert failed.timing is not None and failed.timing.end is not None
    for task in rest:
        assert task.status is TaskStatus.CANCELLED
        assert task.timing is None
        assert task.error is None
    follow_up.assert_not_awaited()
    assert executor.status is RunStatus.ERROR


def test_flush_after_error_is_rejected(make_find_task) -> None:
    executor = Executor("test", tasks=[make_find_task(should_fail=True)])
    asyncio.run(executor.flush())

    with pytest.raises(ExecutorStateError):
        asyncio.run(executor.flush())


def test_append_after_error_resumes_by_default(make_find_task) -> None:
    executor = Executor("test", tasks=[make_find_task(should_fail=True), make_find_task()])
    asyncio.run(executor.flush())
    assert executor.status is RunStatus.ERROR

    executor.append(make_find_task())
    assert executor.status is RunStatus.PENDING

    asyncio.run(executor.flush())

    assert [t.status for t in executor.tasks] == [
        TaskStatus.FAIL,
        TaskStatus.CANCELLED,
        TaskStatus.SUCCESS,
    ]
    assert executor.status is RunStatus.COMPLETED


def test_append_after_error_rejected_when_resume_disabled(make_find_task) -> None:
    executor = Executor(
        "test", tasks=[make_find_task(should_fail=True)], allow_resume_after_error=False
    )
    asyncio.run(executor.flush())

    with pytest.raises(ExecutorStateError):
        executor.append(make_find_task())
    assert len(executor.tasks) == 1


def test_concurrent_flush_runs_tasks_once() -> None:
    async def slow(_param, _context) -> TaskResult:
        await asyncio.sleep(0.05)
        return TaskResult(output="done")

    mock = AsyncMock(side_effect=slow)
    executor = Executor("test", tasks=[ActionTaskSpec(param=None, executor=mock)])

    async def run() -> list[object]:
        return await asyncio.gather(executor.flush(), executor.flush())

    results = asyncio.run(run())

    assert results == ["done", "done"]
    assert mock.await_count == 1
    assert executor.status is RunStatus.COMPLETED


def test_flush_returns_last_output_and_is_noop_when_nothing_pending() -> None:
    mock = AsyncMock(return_value=TaskResult(output={"value": 42}))
    executor = Executor("test", tasks=[ActionTaskSpec(param=None, executor=mock)])

    assert asyncio.run(executor.flush()) == {"value": 42}
    assert asyncio.run(executor.flush()) == {"value": 42}
    assert mock.await_count == 1

    empty = Executor("empty")
    assert asyncio.run(empty.flush()) is None
    assert empty.status is RunStatus.INIT


def test_executor_may_return_output_log_mapping() -> None:
    mock = AsyncMock(return_value={"output": {"value": 1}, "log": "matched 1 element"})
    executor = Executor("test", tasks=[ActionTaskSpec(param=None, executor=mock)])

    assert asyncio.run(executor.flush()) == {"value": 1}

    task = executor.tasks[0]
    assert task.status is TaskStatus.SUCCESS
    assert task.output == {"value": 1}
    assert task.log == "matched 1 element"
    assert executor.status is RunStatus.COMPLETED


def test_executor_returning_unexpected_type_fails_task() -> None:
    mock = AsyncMock(return_value={"output": 1, "element": "stray"})
    executor = Executor("test", tasks=[ActionTaskSpec(param=None, executor=mock)])

    asyncio.run(executor.flush())

    assert executor.tasks[0].status is TaskStatus.FAIL
    assert isinstance(executor.tasks[0].error, TypeError)
    assert executor.status is RunStatus.ERROR


def test_cancelling_flush_marks_run_as_error() -> None:
    async def hang(_param, _context) -> None:
        await asyncio.sleep(10)

    never = AsyncMock(return_value=None)
    executor = Executor(
        "test",
        tasks=[
            ActionTaskSpec(param=None, executor=hang),
            ActionTaskSpec(param=None, executor=never),
        ],
    )

    async def run() -> None:
        flush = asyncio.ensure_future(executor.flush())
        await asyncio.sleep(0.05)
        flush.cancel()
        with pytest.raises(asyncio.CancelledError):
            await flush

    asyncio.run(run())

    assert executor.tasks[0].status is TaskStatus.FAIL
    assert executor.tasks[1].status is TaskStatus.CANCELLED
    never.assert_not_awaited()
    assert executor.status is RunStatus.ERROR


def test_insight_spec_requires_sub_type() -> None:
    from ui_task_executor.executor.tasks import InsightTaskSpec

    spec = InsightTaskSpec(sub_type="", param={}, executor=AsyncMock())
    with pytest.raises(ValueError):
        Executor("test", tasks=[spec])


def test_cancelling_one_of_two_flush_callers_halts_run_for_both() -> None:
    async def hang(_param, _context) -> None:
        await asyncio.sleep(10)

    never = AsyncMock(return_value=None)
    executor = Executor(
        "test",
        tasks=[
            ActionTaskSpec(param=None, executor=hang),
            ActionTaskSpec(param=None, executor=never),
        ],
    )

    async def run() -> object:
        first = asyncio.ensure_future(executor.flush())
        second = asyncio.ensure_future(executor.flush())
        await asyncio.sleep(0.05)
        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first
        return await asyncio.wait_for(second, timeout=2)

    assert asyncio.run(run()) is None

    assert executor.tasks[0].status is TaskStatus.FAIL
    assert executor.tasks[1].status is TaskStatus.CANCELLED
    never.assert_not_awaited()
    assert executor.status is RunStatus.ERROR


def test_flush_from_inside_an_executor_fails_instead_of_hanging() -> None:
    never = AsyncMock(return_value=None)

    async def nested_flush(_param, _context) -> None:
        await executor.flush()

    executor = Executor(
        "test",
        tasks=[
            ActionTaskSpec(param=None, executor=nested_flush),
            ActionTaskSpec(param=None, executor=never),
        ],
    )

    async def run() -> object:
        return await asyncio.wait_for(executor.flush(), timeout=2)

    assert asyncio.run(run()) is None

    assert executor.tasks[0].status is TaskStatus.FAIL
    assert isinstance(executor.tasks[0].error, ExecutorStateError)
    assert executor.tasks[1].status is TaskStatus.CANCELLED
    never.assert_not_awaited()
    assert executor.status is RunStatus.ERROR


def test_flush_logs_final_status(make_find_task, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="ui_task_executor.executor.engine")
    executor = Executor("test", tasks=[make_find_task()])

    asyncio.run(executor.flush())

    (record,) = [r for r in caplog.records if r.getMessage() == "Flush completed"]
    assert record.run_id == "test"
    assert record.status == "completed"
    assert record.task_count == 1
