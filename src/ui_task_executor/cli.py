"""CLI entrypoint for inspecting and rendering persisted run dumps."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from ui_task_executor import __version__
from ui_task_executor.config import ExecutorSettings
from ui_task_executor.executor.dump import GroupedRunDump, RunDump, TaskDump
from ui_task_executor.logging import configure_logging
from ui_task_executor.reporting.log_writer import GROUPED_ACTION_DUMP_FILE_EXT, LogWriter

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ui-task-executor",
        description="Inspect and render UI task executor run dumps",
    )
    parser.add_argument("--version", action="version", version=f"ui-task-executor {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    report = subparsers.add_parser("report", help="Render a run dump into an HTML report")
    report.add_argument("--dump", required=True, type=Path, help="Path to a run dump JSON file")
    report.add_argument(
        "--name",
        default=None,
        help="Report file name without extension (defaults to the dump file name)",
    )

    summary = subparsers.add_parser("summary", help="Print one line per task of a run dump")
    summary.add_argument("--dump", required=True, type=Path, help="Path to a run dump JSON file")

    return parser


def _load_dump(path: Path) -> RunDump | GroupedRunDump:
    """Load a single-run dump or a grouped dump bundling several runs."""

    raw = path.read_text(encoding="utf-8")
    try:
        return RunDump.model_validate_json(raw)
    except ValidationError:
        return GroupedRunDump.model_validate_json(raw)


def _print_run(dump: RunDump) -> None:
    print(f"{dump.id}  [{dump.status.value}]  {dump.description or ''}".rstrip())
    for index, task in enumerate(dump.tasks):
        print(_format_task(index, task))


def _default_report_name(path: Path) -> str:
    name = path.name
    suffix = f".{GROUPED_ACTION_DUMP_FILE_EXT}"
    if name.endswith(suffix):
        return name[: -len(suffix)]
    return path.stem


def _format_task(index: int, task: TaskDump) -> str:
    kind = task.type.value if task.sub_type is None else f"{task.type.value}/{task.sub_type}"
    cost = f"{task.timing.cost}ms" if task.timing and task.timing.cost is not None else "-"
    line = f"{index:>3}  {kind:<20} {task.status.value:<10} {cost}"
    if task.error:
        line += f"  {task.error}"
    return line


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = ExecutorSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    try:
        try:
            dump = _load_dump(args.dump)
        except (OSError, ValidationError) as e:
            logger.error("Could not load dump", extra={"path": str(args.dump), "error": str(e)})
            print(f"Could not load dump {args.dump}: {e}", file=sys.stderr)
            return 2

        if args.command == "report":
            writer = LogWriter(settings)
            name = args.name or _default_report_name(args.dump)
            path = writer.write_dump_report(name, args.dump.read_text(encoding="utf-8"))
            print(f"Report written to {path}")
            return 0

        if args.command == "summary":
            if isinstance(dump, GroupedRunDump):
                print(f"# {dump.group_name}  {dump.group_description or ''}".rstrip())
                for run in dump.executions:
                    _print_run(run)
            else:
                _print_run(dump)
            return 0

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
