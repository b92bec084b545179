"""Wizard configuration using pydantic-settings.

Every path the wizard touches is derived from SetupSettings, so the
whole run is parameterised by one project directory. Values can be
overridden with PUBTRACKER_* environment variables or a .env file.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


class SetupSettings(BaseSettings):
    """Settings for one setup run.

    Environment variables (all optional):
    - PUBTRACKER_PROJECT_DIR: Directory holding the Apps Script project
    - PUBTRACKER_CLASP_COMMAND / PUBTRACKER_NPM_COMMAND: Executables to invoke
    - PUBTRACKER_TIME_ZONE: Time zone written into appsscript.json
    """

    model_config = SettingsConfigDict(
        env_prefix="PUBTRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    project_dir: Path = Field(default_factory=Path.cwd)

    # Files written into project_dir
    binding_filename: str = ".clasp.json"
    ignore_filename: str = ".claspignore"
    manifest_filename: str = "appsscript.json"
    deps_dirname: str = "node_modules"

    # rootDir recorded in .clasp.json for existing projects
    source_root: str = "./src"

    # External tools
    clasp_command: str = "clasp"
    npm_command: str = "npm"
    clasp_package: str = "@google/clasp"

    # Defaults offered to the user
    default_spreadsheet_name: str = "Publications Tracker"
    time_zone: str = "America/New_York"

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    @field_validator("project_dir")
    @classmethod
    def resolve_project_dir(cls, v: Path) -> Path:
        return v.expanduser().resolve()

    @field_validator(
        "binding_filename", "ignore_filename", "manifest_filename", "deps_dirname"
    )
    @classmethod
    def validate_bare_name(cls, v: str) -> str:
        """File names are joined onto project_dir and must not escape it."""
        if not v or "/" in v or "\\" in v or v in {".", ".."}:
            raise ValueError(f"must be a bare file name, got {v!r}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {sorted(LOG_LEVELS)}")
        return level

    @property
    def binding_path(self) -> Path:
        return self.project_dir / self.binding_filename

    @property
    def ignore_path(self) -> Path:
        return self.project_dir / self.ignore_filename

    @property
    def manifest_path(self) -> Path:
        return self.project_dir / self.manifest_filename

    @property
    def deps_path(self) -> Path:
        return self.project_dir / self.deps_dirname
