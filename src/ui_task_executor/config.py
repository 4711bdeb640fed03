"""Configuration for the task executor and its log/report writer.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

The log directory is an explicit setting handed to whichever component
persists dumps; nothing in the package keeps it as module state.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExecutorSettings(BaseSettings):
    """Settings for running tasks and persisting their dumps.

    Environment variables:
    - LOG_LEVEL                              (optional)
    - UI_EXECUTOR_LOG_DIR                    (optional)
    - UI_EXECUTOR_REPORT_TEMPLATE            (optional)
    - UI_EXECUTOR_MANAGE_GITIGNORE           (optional)
    - UI_EXECUTOR_ALLOW_RESUME_AFTER_ERROR   (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `ExecutorSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    log_dir: Path = Field(
        default=Path("executor_run"),
        validation_alias="UI_EXECUTOR_LOG_DIR",
        description="Root directory for dump, cache and report files",
    )

    report_template_path: Path | None = Field(
        default=None,
        validation_alias="UI_EXECUTOR_REPORT_TEMPLATE",
        description=(
            "HTML template containing a '{{dump}}' placeholder. "
            "Falls back to the template shipped with the package."
        ),
    )

    manage_gitignore: bool = Field(
        default=True,
        validation_alias="UI_EXECUTOR_MANAGE_GITIGNORE",
        description="Add the dump/report folders to the parent .gitignore on first write",
    )

    allow_resume_after_error: bool = Field(
        default=True,
        validation_alias="UI_EXECUTOR_ALLOW_RESUME_AFTER_ERROR",
        description=(
            "If true, appending to a run that ended in error re-opens it for a new flush. "
            "If false, such an append is rejected."
        ),
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}:
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @property
    def dump_dir(self) -> Path:
        """Directory where run dumps are written."""

        return self.log_dir / "dump"

    @property
    def cache_dir(self) -> Path:
        return self.log_dir / "cache"

    @property
    def report_dir(self) -> Path:
        """Directory where rendered HTML reports are written."""

        return self.log_dir / "report"
