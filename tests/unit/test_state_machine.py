"""Unit tests for run and task status transitions.

Illegal transitions must fail loudly.
"""

from __future__ import annotations

import pytest

from ui_task_executor.executor.state_machine import (
    IllegalTransitionError,
    RunStatus,
    TaskStatus,
    transition_run,
    transition_task,
)


def test_run_transitions_follow_lifecycle() -> None:
    status = RunStatus.INIT
    for to in (RunStatus.PENDING, RunStatus.RUNNING, RunStatus.COMPLETED, RunStatus.PENDING):
        status = transition_run(current=status, to=to)
    assert status is RunStatus.PENDING


def test_run_transition_rejects_illegal_transitions() -> None:
    with pytest.raises(IllegalTransitionError):
        transition_run(current=RunStatus.INIT, to=RunStatus.RUNNING)
    with pytest.raises(IllegalTransitionError):
        transition_run(current=RunStatus.ERROR, to=RunStatus.RUNNING)


def test_terminal_task_statuses_are_final() -> None:
    for terminal in (TaskStatus.SUCCESS, TaskStatus.FAIL, TaskStatus.CANCELLED):
        with pytest.raises(IllegalTransitionError):
            transition_task(current=terminal, to=TaskStatus.RUNNING)

    with pytest.raises(IllegalTransitionError):
        transition_task(current=TaskStatus.RUNNING, to=TaskStatus.CANCELLED)
