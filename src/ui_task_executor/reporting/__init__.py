"""Persistence of run dumps and HTML reports."""

from ui_task_executor.reporting.log_writer import (
    GROUPED_ACTION_DUMP_FILE_EXT,
    INSIGHT_DUMP_FILE_EXT,
    LogWriter,
    ReportDump,
    tmp_dir,
    tmp_file,
)

__all__ = [
    "GROUPED_ACTION_DUMP_FILE_EXT",
    "INSIGHT_DUMP_FILE_EXT",
    "LogWriter",
    "ReportDump",
    "tmp_dir",
    "tmp_file",
]
