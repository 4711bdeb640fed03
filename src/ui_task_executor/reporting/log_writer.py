"""File-backed persistence for run dumps and HTML reports.

Layout under the configured log directory:
- `dump/`   stringified run dumps
- `cache/`  caller-managed caches
- `report/` HTML reports rendered from dumps

The writer owns the log directory explicitly (from settings); there is no
process-wide default to mutate.
"""

from __future__ import annotations

import logging
import tempfile
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Literal
from urllib.parse import quote

from pydantic import BaseModel

from ui_task_executor.config import ExecutorSettings
from ui_task_executor.executor.dump import stringify_dump
from ui_task_executor.executor.engine import Executor

logger = logging.getLogger(__name__)

LogKind = Literal["dump", "cache", "report"]

INSIGHT_DUMP_FILE_EXT = "insight-dump.json"
GROUPED_ACTION_DUMP_FILE_EXT = "web-dump.json"

DUMP_PLACEHOLDER = "{{dump}}"
DUMP_SCRIPT_TYPE = "ui_task_executor_dump"

_TMP_DIR_NAME = "ui-task-executor"


@dataclass(frozen=True, slots=True)
class ReportDump:
    """One dump embedded in a report, plus attributes set on its script tag."""

    dump_string: str
    attributes: dict[str, str] = field(default_factory=dict)


def _script_tag(dump_string: str, attributes: dict[str, str] | None = None) -> str:
    attrs = "".join(
        f' {key}="{quote(str(value), safe="")}"' for key, value in (attributes or {}).items()
    )
    return f'<script type="{DUMP_SCRIPT_TYPE}" type="application/json"{attrs}>{dump_string}</script>'


class LogWriter:
    """Writes dump, cache and report files below `settings.log_dir`."""

    def __init__(self, settings: ExecutorSettings) -> None:
        self.settings = settings
        self.log_dir = settings.log_dir
        self._env_ready = False

    def dir_for(self, kind: LogKind) -> Path:
        path = self.log_dir / kind
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _ensure_gitignore(self) -> None:
        """Make sure the dump and report folders are ignored by git.

        The entry goes into the `.gitignore` next to the log directory.
        """
        gitignore_path = self.log_dir.resolve().parent / ".gitignore"
        content = ""
        if gitignore_path.exists():
            content = gitignore_path.read_text(encoding="utf-8")

        name = self.log_dir.name
        if f"{name}/" in content:
            return

        gitignore_path.write_text(
            f"{content}\n# ui-task-executor dump files\n{name}/report\n{name}/dump\n",
            encoding="utf-8",
        )
        logger.info("Added log directory to .gitignore", extra={"path": str(gitignore_path)})

    def _template(self) -> str:
        if self.settings.report_template_path is not None:
            path = self.settings.report_template_path
            if not path.exists():
                raise FileNotFoundError(f"Report template not found: {path}")
            return path.read_text(encoding="utf-8")
        return (
            resources.files("ui_task_executor.reporting")
            .joinpath("templates/report.html")
            .read_text(encoding="utf-8")
        )

    def write_dump_report(self, file_name: str, dump_data: str | Sequence[ReportDump]) -> Path:
        """Render dumps into the report template and write `<file_name>.html`."""

        template = self._template()
        if isinstance(dump_data, str):
            rendered = _script_tag(dump_data)
        else:
            rendered = "\n".join(_script_tag(d.dump_string, d.attributes) for d in dump_data)

        report_path = self.dir_for("report") / f"{file_name}.html"
        report_path.write_text(template.replace(DUMP_PLACEHOLDER, rendered), encoding="utf-8")
        logger.info("Report written", extra={"path": str(report_path)})
        return report_path

    def write_log_file(
        self,
        *,
        file_name: str,
        file_ext: str,
        content: str,
        kind: LogKind = "dump",
        generate_report: bool = False,
    ) -> Path:
        """Write a log file and optionally render it into a report.

        Returns:
            The report path if `generate_report` is set, otherwise the file path.
        """
        target_dir = self.dir_for(kind)
        if not self._env_ready:
            if self.settings.manage_gitignore:
                self._ensure_gitignore()
            self._env_ready = True

        file_path = target_dir / f"{file_name}.{file_ext}"
        # file_name may contain sub-directories.
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
        logger.info("Log file written", extra={"path": str(file_path), "kind": kind})

        if generate_report:
            return self.write_dump_report(file_name, content)
        return file_path

    def write_run_dump(
        self,
        run: Executor | BaseModel,
        *,
        file_name: str | None = None,
        generate_report: bool = False,
    ) -> Path:
        """Persist a run (or an already-taken dump) as `<file_name>.web-dump.json`."""

        dump = run.dump() if isinstance(run, Executor) else run
        if file_name is None:
            file_name = run.id if isinstance(run, Executor) else str(getattr(dump, "id", "dump"))
        return self.write_log_file(
            file_name=file_name,
            file_ext=GROUPED_ACTION_DUMP_FILE_EXT,
            content=stringify_dump(dump),
            generate_report=generate_report,
        )


def tmp_dir() -> Path:
    path = Path(tempfile.gettempdir()) / _TMP_DIR_NAME
    path.mkdir(parents=True, exist_ok=True)
    return path


def tmp_file(file_ext_without_dot: str) -> Path:
    return tmp_dir() / f"{uuid.uuid4()}.{file_ext_without_dot}"
