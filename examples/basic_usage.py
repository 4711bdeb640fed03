#!/usr/bin/env python3
"""Programmatic run example.

This demonstrates using the executor directly:

* queue an Insight "find" task followed by an Action that uses its element
* flush the run
* persist the dump (and optionally an HTML report) under the log directory
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Any, Sequence

from ui_task_executor.config import ExecutorSettings
from ui_task_executor.executor import (
    ActionTaskSpec,
    ExecutionContext,
    Executor,
    InsightSubType,
    InsightTaskSpec,
    TaskResult,
)
from ui_task_executor.logging import configure_logging
from ui_task_executor.reporting import LogWriter


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a two-step task list (programmatic example).")
    parser.add_argument("--query", default="the login button", help="Element to look for")
    parser.add_argument("--report", action="store_true", help="Also render an HTML report")
    return parser.parse_args(argv)


async def find_element(param: dict[str, Any], _context: ExecutionContext) -> TaskResult:
    element = {"id": "el-1", "content": param["query"], "rect": [10, 20, 80, 24]}
    return TaskResult(output={"element": element}, log={"query": param["query"]})


async def tap(param: dict[str, Any], context: ExecutionContext) -> None:
    print(f"{param['action']} on {context.element['content']!r}")


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = ExecutorSettings()
    configure_logging(settings.log_level)

    executor = Executor(
        "basic-usage",
        "find an element and tap it",
        [
            InsightTaskSpec(
                sub_type=InsightSubType.FIND, param={"query": args.query}, executor=find_element
            ),
            ActionTaskSpec(param={"action": "tap"}, executor=tap, sub_type="Tap"),
        ],
        allow_resume_after_error=settings.allow_resume_after_error,
    )
    asyncio.run(executor.flush())

    path = LogWriter(settings).write_run_dump(executor, generate_report=args.report)
    print(f"Run {executor.id} finished with status {executor.status.value}")
    print(f"Persisted to: {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
