"""Wrappers around the clasp and npm command line tools.

ClaspTool covers the clasp commands the wizard needs (version, login,
login status, create). PackageManager covers npm installs. Both go
through a CommandRunner so tests never spawn processes.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from loguru import logger

from pubtracker_setup.errors import CommandError, IdentifierNotFound, InstallError
from pubtracker_setup.runner import CommandResult, CommandRunner, OutputMode

if TYPE_CHECKING:
    from pathlib import Path

    from pubtracker_setup.config import SetupSettings
    from pubtracker_setup.files import DeploymentBinding

# Editor URL printed by `clasp create`, e.g.
#   Created new standalone script: https://script.google.com/d/<id>/edit
LEGACY_SCRIPT_URL = re.compile(r"https://script\.google\.com/d/([^/\s]+)/")


def parse_script_id(id_or_url: str) -> str:
    """Extract script ID from a URL or return as-is.

    Supports URLs like:
      https://script.google.com/d/SCRIPT_ID/edit
      https://script.google.com/home/projects/SCRIPT_ID/edit
    """
    id_or_url = id_or_url.strip()
    patterns = [
        r"script\.google\.com/d/([a-zA-Z0-9_-]+)",
        r"script\.google\.com/home/projects/([a-zA-Z0-9_-]+)",
        r"script\.google\.com/macros/d/([a-zA-Z0-9_-]+)",
    ]
    for pattern in patterns:
        match = re.search(pattern, id_or_url)
        if match:
            return match.group(1)
    return id_or_url


def script_id_from_json_output(output: str) -> str:
    """Read scriptId from machine-readable tool output, if it is JSON."""
    text = output.strip()
    if not text.startswith("{"):
        return ""
    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError:
        return ""
    if not isinstance(data, dict):
        return ""
    return str(data.get("scriptId", "") or "")


def script_id_from_legacy_output(output: str) -> str:
    """Compatibility path: scrape the editor URL out of free-form text.

    Only used when neither .clasp.json nor JSON output carries the ID.
    Breaks silently if clasp changes its wording or URL shape.
    """
    match = LEGACY_SCRIPT_URL.search(output)
    return match.group(1) if match else ""


def resolve_script_id(
    binding: DeploymentBinding | None, output: str, *, binding_filename: str
) -> str:
    """Pick the script ID of a freshly created project.

    Precedence: the binding file written by clasp, then JSON output,
    then the legacy URL scrape. Disagreements are logged.

    Raises:
        IdentifierNotFound: If no source yields an ID.
    """
    candidates = [
        ("binding file", binding.script_id if binding else ""),
        ("JSON output", script_id_from_json_output(output)),
        ("editor URL", script_id_from_legacy_output(output)),
    ]
    found = [(source, value) for source, value in candidates if value]
    if not found:
        raise IdentifierNotFound(
            "Project was created but no script ID could be determined. "
            f"Copy it from the Apps Script editor URL into {binding_filename}."
        )

    source, script_id = found[0]
    for other_source, other in found[1:]:
        if other != script_id:
            logger.warning(
                "Script ID from {} ({}) differs from {} ({}); using {}",
                other_source,
                other,
                source,
                script_id,
                source,
            )
    logger.debug("Resolved script ID {} from {}", script_id, source)
    return script_id


@dataclass(frozen=True)
class CreateResult:
    """Output of `clasp create`."""

    title: str
    output: str


class ClaspTool:
    """The clasp CLI as seen by the wizard."""

    def __init__(self, runner: CommandRunner, settings: SetupSettings) -> None:
        self._runner = runner
        self._settings = settings

    def _argv(self, *args: str) -> list[str]:
        return [self._settings.clasp_command, *args]

    def is_available(self) -> bool:
        """True if `clasp --version` succeeds."""
        try:
            result = self._runner.run(self._argv("--version"), mode=OutputMode.DISCARD)
        except CommandError:
            return False
        return result.ok

    def is_logged_in(self) -> bool:
        """True if `clasp login --status` reports an authenticated session."""
        try:
            result = self._runner.run(
                self._argv("login", "--status"), mode=OutputMode.DISCARD
            )
        except CommandError:
            return False
        return result.ok

    def login(self) -> CommandResult:
        """Run the interactive browser login. Blocks until it finishes."""
        return self._runner.check(self._argv("login"), mode=OutputMode.INHERIT)

    def create(self, title: str, cwd: Path) -> CreateResult:
        """Create a standalone script project in cwd.

        clasp writes .clasp.json into cwd as a side effect.

        Raises:
            CommandError: If clasp exits non-zero.
        """
        result = self._runner.check(
            self._argv("create", "--type", "standalone", "--title", title),
            cwd=cwd,
            mode=OutputMode.CAPTURE,
        )
        return CreateResult(title=title, output=result.output)


class PackageManager:
    """npm, for local dependencies and the global clasp install."""

    def __init__(self, runner: CommandRunner, settings: SetupSettings) -> None:
        self._runner = runner
        self._settings = settings

    def install(self, cwd: Path) -> CommandResult:
        """Run `npm install` in cwd with output streamed to the user.

        Raises:
            InstallError: Carrying npm's exit code.
        """
        args = [self._settings.npm_command, "install"]
        try:
            return self._runner.check(args, cwd=cwd, mode=OutputMode.INHERIT)
        except CommandError as e:
            raise InstallError(e.command, e.returncode, e.output) from e

    def install_global(self, package: str) -> CommandResult:
        """Run `npm install -g <package>` with output streamed to the user.

        Raises:
            CommandError: If npm fails or is missing (exit 1).
        """
        return self._runner.check(
            [self._settings.npm_command, "install", "-g", package], mode=OutputMode.INHERIT
        )
