"""Tests for the clasp/npm wrappers and script ID parsing."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from conftest import FakeRunner
from pubtracker_setup.clasp import (
    ClaspTool,
    PackageManager,
    parse_script_id,
    resolve_script_id,
    script_id_from_json_output,
    script_id_from_legacy_output,
)
from pubtracker_setup.config import SetupSettings
from pubtracker_setup.errors import CommandError, IdentifierNotFound, InstallError
from pubtracker_setup.files import DeploymentBinding

CREATE_OUTPUT = (
    "Created new standalone script: https://script.google.com/d/1url_id/edit\n"
    "Warning: files in subfolder are not accounted for.\n"
)


@pytest.mark.parametrize(
    "answer",
    [
        "https://script.google.com/d/1abc_xyz/edit",
        "  https://script.google.com/d/1abc_xyz/edit\n",
        "https://script.google.com/d/1abc_xyz/edit?usp=sharing",
        "https://script.google.com/home/projects/1abc_xyz/edit#settings",
        "https://script.google.com/macros/d/1abc_xyz/exec",
        "script.google.com/d/1abc_xyz",
    ],
)
def test_pasted_editor_urls_reduce_to_id(answer: str) -> None:
    """Whatever the user copies out of the browser bar yields the bare ID."""
    assert parse_script_id(answer) == "1abc_xyz"


@pytest.mark.parametrize("answer", ["1abc_xyz", " 1abc_xyz ", "\t1abc_xyz\n"])
def test_typed_id_is_stripped(answer: str) -> None:
    assert parse_script_id(answer) == "1abc_xyz"


def test_unrecognised_url_is_kept_verbatim() -> None:
    """Anything that is not an Apps Script URL is treated as the ID itself."""
    assert parse_script_id("https://docs.google.com/spreadsheets/d/1sheet/edit") == (
        "https://docs.google.com/spreadsheets/d/1sheet/edit"
    )


# --- Identifier sources ---


def test_script_id_from_json_output() -> None:
    assert script_id_from_json_output(json.dumps({"scriptId": "1json"})) == "1json"


@pytest.mark.parametrize("output", ["", "not json", "{broken", "[1, 2]", '{"title": "x"}'])
def test_script_id_from_json_output_ignores_other_text(output: str) -> None:
    assert script_id_from_json_output(output) == ""


def test_script_id_from_legacy_output() -> None:
    assert script_id_from_legacy_output(CREATE_OUTPUT) == "1url_id"
    assert script_id_from_legacy_output("Created project.") == ""


def test_resolve_prefers_binding_file() -> None:
    binding = DeploymentBinding(script_id="1file")
    assert resolve_script_id(binding, CREATE_OUTPUT, binding_filename=".clasp.json") == "1file"


def test_resolve_prefers_json_over_url() -> None:
    output = json.dumps({"scriptId": "1json", "url": "https://script.google.com/d/1url/edit"})
    assert resolve_script_id(None, output, binding_filename=".clasp.json") == "1json"


def test_resolve_ignores_empty_binding() -> None:
    binding = DeploymentBinding(script_id="")
    assert resolve_script_id(binding, CREATE_OUTPUT, binding_filename=".clasp.json") == "1url_id"


def test_resolve_without_any_source_names_binding_file() -> None:
    with pytest.raises(IdentifierNotFound, match=r"into deploy\.json"):
        resolve_script_id(None, "Created project.", binding_filename="deploy.json")


# --- ClaspTool ---


def test_clasp_available(runner: FakeRunner, settings: SetupSettings) -> None:
    clasp = ClaspTool(runner, settings)
    assert clasp.is_available() is True

    runner.respond("clasp", "--version", returncode=1)
    assert clasp.is_available() is False


def test_clasp_not_on_path(runner: FakeRunner, settings: SetupSettings) -> None:
    runner.missing("clasp")
    clasp = ClaspTool(runner, settings)

    assert clasp.is_available() is False
    assert clasp.is_logged_in() is False


def test_clasp_logged_in(runner: FakeRunner, settings: SetupSettings) -> None:
    clasp = ClaspTool(runner, settings)
    assert clasp.is_logged_in() is True

    runner.respond("clasp", "login", "--status", returncode=1)
    assert clasp.is_logged_in() is False


def test_clasp_login_failure_raises(runner: FakeRunner, settings: SetupSettings) -> None:
    runner.respond("clasp", "login", returncode=1)

    with pytest.raises(CommandError):
        ClaspTool(runner, settings).login()


def test_clasp_create_runs_in_project_dir(runner: FakeRunner, settings: SetupSettings) -> None:
    runner.respond(
        "clasp", "create", "--type", "standalone", "--title", "T - Script", output=CREATE_OUTPUT
    )

    result = ClaspTool(runner, settings).create("T - Script", settings.project_dir)

    assert result.output == CREATE_OUTPUT
    assert result.title == "T - Script"
    assert runner.calls[0][1] == settings.project_dir


def test_custom_clasp_command(runner: FakeRunner, project_dir: Path) -> None:
    settings = SetupSettings(project_dir=project_dir, clasp_command="/opt/bin/clasp")

    ClaspTool(runner, settings).is_available()

    assert runner.ran("/opt/bin/clasp", "--version")


# --- PackageManager ---


def test_npm_install(runner: FakeRunner, settings: SetupSettings) -> None:
    PackageManager(runner, settings).install(settings.project_dir)

    assert runner.calls == [(("npm", "install"), settings.project_dir, "inherit")]


def test_npm_install_global(runner: FakeRunner, settings: SetupSettings) -> None:
    PackageManager(runner, settings).install_global("@google/clasp")

    assert runner.calls == [(("npm", "install", "-g", "@google/clasp"), None, "inherit")]


def test_npm_install_failure_keeps_npm_exit_code(
    runner: FakeRunner, settings: SetupSettings
) -> None:
    runner.respond("npm", "install", returncode=243)

    with pytest.raises(InstallError) as exc_info:
        PackageManager(runner, settings).install(settings.project_dir)

    assert exc_info.value.exit_code == 243
    assert exc_info.value.command == ["npm", "install"]


def test_npm_missing_for_local_install(runner: FakeRunner, settings: SetupSettings) -> None:
    runner.missing("npm")

    with pytest.raises(InstallError) as exc_info:
        PackageManager(runner, settings).install(settings.project_dir)

    assert exc_info.value.exit_code == 127


def test_global_install_failure_exits_one(runner: FakeRunner, settings: SetupSettings) -> None:
    """Only the local dependency install propagates npm's exit code."""
    runner.respond("npm", "install", "-g", "@google/clasp", returncode=243)

    with pytest.raises(CommandError) as exc_info:
        PackageManager(runner, settings).install_global("@google/clasp")

    assert not isinstance(exc_info.value, InstallError)
    assert exc_info.value.returncode == 243
    assert exc_info.value.exit_code == 1


def test_global_install_without_npm_exits_one(
    runner: FakeRunner, settings: SetupSettings
) -> None:
    runner.missing("npm")

    with pytest.raises(CommandError) as exc_info:
        PackageManager(runner, settings).install_global("@google/clasp")

    assert exc_info.value.exit_code == 1
