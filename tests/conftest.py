"""Test configuration and fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from ui_task_executor.config import ExecutorSettings
from ui_task_executor.executor.tasks import (
    ExecutionContext,
    InsightSubType,
    InsightTaskSpec,
    TaskResult,
)

_SETTINGS_ENV = (
    "LOG_LEVEL",
    "UI_EXECUTOR_LOG_DIR",
    "UI_EXECUTOR_REPORT_TEMPLATE",
    "UI_EXECUTOR_MANAGE_GITIGNORE",
    "UI_EXECUTOR_ALLOW_RESUME_AFTER_ERROR",
)


class FakeInsight:
    """Stands in for the perception subsystem: resolves queries to fixed elements."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.last_dump: dict[str, Any] | None = None

    async def find(self, query: str) -> dict[str, Any]:
        await asyncio.sleep(0)
        element = {
            "id": f"{self.name}-0",
            "content": query,
            "rect": {"left": 10, "top": 20, "width": 80, "height": 24},
        }
        self.last_dump = {"type": "locate", "query": query, "matched": [element]}
        return element


def insight_find_task(*, should_fail: bool = False, name: str = "test-executor") -> InsightTaskSpec:
    insight = FakeInsight(name)

    async def executor(param: dict[str, Any], _context: ExecutionContext) -> TaskResult:
        if should_fail:
            await asyncio.sleep(0.1)
            raise RuntimeError("test-error")
        element = await insight.find(param["query"])
        return TaskResult(output={"element": element}, log={"dump": insight.last_dump})

    return InsightTaskSpec(sub_type=InsightSubType.FIND, param={"query": "test"}, executor=executor)


@pytest.fixture
def make_find_task() -> Callable[..., InsightTaskSpec]:
    """Provide a factory for Insight find tasks backed by a fake perception layer."""
    return insight_find_task


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Isolate settings from the host environment and any real `.env` file."""
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def settings(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> ExecutorSettings:
    """Provide settings whose log directory lives under a temporary project root."""
    project = clean_env / "project"
    project.mkdir()
    monkeypatch.setenv("UI_EXECUTOR_LOG_DIR", str(project / "executor_run"))
    return ExecutorSettings()
