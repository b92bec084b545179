"""Local configuration files for a clasp project.

Three files live in the project directory:
    .clasp.json       # Binding: {"scriptId", "rootDir"}
    .claspignore      # Glob patterns excluded from push
    appsscript.json   # Manifest: time zone, runtime, logging target

The wizard only ever creates them; it never merges into existing content.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pubtracker_setup.errors import BindingError

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    "**/**",
    "!src/**/*.gs",
    "!src/**/*.html",
    "!appsscript.json",
)


class ExceptionLogging(StrEnum):
    NONE = "NONE"
    STACKDRIVER = "STACKDRIVER"


class RuntimeVersion(StrEnum):
    V8 = "V8"
    DEPRECATED_ES5 = "DEPRECATED_ES5"


# --- Data classes ---


@dataclass(frozen=True)
class DeploymentBinding:
    """Links a local directory to a remote Apps Script project."""

    script_id: str
    root_dir: str = "./src"
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        return bool(self.script_id.strip())

    def to_dict(self) -> dict[str, Any]:
        return {"scriptId": self.script_id, "rootDir": self.root_dir}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DeploymentBinding:
        return cls(
            script_id=str(data.get("scriptId", "") or ""),
            root_dir=str(data.get("rootDir", "") or ""),
            raw=data,
        )


@dataclass(frozen=True)
class DeploymentManifest:
    """Contents of appsscript.json."""

    time_zone: str = "America/New_York"
    dependencies: dict[str, Any] = field(default_factory=dict)
    exception_logging: ExceptionLogging = ExceptionLogging.STACKDRIVER
    runtime_version: RuntimeVersion = RuntimeVersion.V8

    def to_dict(self) -> dict[str, Any]:
        return {
            "timeZone": self.time_zone,
            "dependencies": dict(self.dependencies),
            "exceptionLogging": str(self.exception_logging),
            "runtimeVersion": str(self.runtime_version),
        }


@dataclass(frozen=True)
class IgnoreList:
    """Ordered glob patterns for .claspignore."""

    patterns: tuple[str, ...] = DEFAULT_IGNORE_PATTERNS

    def render(self) -> str:
        return "".join(f"{pattern}\n" for pattern in self.patterns)


# --- Serialization ---


def _dump_json(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2)


def load_binding(path: Path) -> DeploymentBinding | None:
    """Read .clasp.json.

    Returns:
        The binding, or None if the file does not exist.

    Raises:
        BindingError: If the file is not a JSON object.
    """
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise BindingError(f"{path.name} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise BindingError(f"{path.name} must contain a JSON object")
    return DeploymentBinding.from_dict(data)


def write_binding(path: Path, binding: DeploymentBinding) -> Path:
    """Write .clasp.json, replacing any existing file."""
    path.write_text(_dump_json(binding.to_dict()), encoding="utf-8")
    return path


def write_if_absent(path: Path, content: str) -> bool:
    """Write content to path unless the path already exists.

    Returns:
        True if the file was written.
    """
    if path.exists():
        return False
    path.write_text(content, encoding="utf-8")
    return True


def write_ignore_list(path: Path, ignore_list: IgnoreList | None = None) -> bool:
    return write_if_absent(path, (ignore_list or IgnoreList()).render())


def write_manifest(path: Path, manifest: DeploymentManifest | None = None) -> bool:
    return write_if_absent(path, _dump_json((manifest or DeploymentManifest()).to_dict()))
