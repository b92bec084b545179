"""SetupWizard - guided bootstrap of a clasp project.

Runs a fixed sequence of steps, each of which either advances the wizard
to the next state, stops it gracefully (SetupCancelled) or fails it
(SetupError). Steps never revisit an earlier state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from loguru import logger

from pubtracker_setup.clasp import (
    ClaspTool,
    PackageManager,
    parse_script_id,
    resolve_script_id,
)
from pubtracker_setup.errors import SetupCancelled, SetupError
from pubtracker_setup.files import (
    DeploymentBinding,
    DeploymentManifest,
    load_binding,
    write_binding,
    write_ignore_list,
    write_manifest,
)
from pubtracker_setup.logging import set_step
from pubtracker_setup.prompts import Prompter, confirm_or_exit, require_non_empty
from pubtracker_setup.runner import SubprocessRunner

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from pubtracker_setup.config import SetupSettings
    from pubtracker_setup.runner import CommandRunner

LOGIN_RESUME_COMMAND = "pubtracker-setup login"


class ProjectMode(StrEnum):
    NEW = "new"
    EXISTING = "existing"


class SetupState(StrEnum):
    START = "start"
    DEPENDENCIES_ENSURED = "dependencies_ensured"
    TOOL_ENSURED = "tool_ensured"
    BINDING_CHECKED = "binding_checked"
    AUTHENTICATED = "authenticated"
    MODE_SELECTED = "mode_selected"
    PROVISIONED = "provisioned"
    AUX_FILES_WRITTEN = "aux_files_written"
    DONE = "done"
    CANCELLED = "cancelled"
    FATAL = "fatal"


_ORDER = list(SetupState)
TERMINAL_STATES = frozenset({SetupState.DONE, SetupState.CANCELLED, SetupState.FATAL})


class IllegalTransitionError(ValueError):
    pass


@dataclass
class SetupResult:
    """Outcome of a full wizard run."""

    state: SetupState
    script_id: str = ""
    mode: ProjectMode | None = None
    files_written: list[Path] = field(default_factory=list)
    message: str = ""

    @property
    def exit_code(self) -> int:
        return 1 if self.state == SetupState.FATAL else 0


class SetupWizard:
    """Walks the user through one environment bootstrap.

    Example:
        >>> wizard = SetupWizard(SetupSettings(project_dir=Path(".")), QuestionaryPrompter())
        >>> result = wizard.run()
    """

    def __init__(
        self,
        settings: SetupSettings,
        prompter: Prompter,
        *,
        runner: CommandRunner | None = None,
        echo: Callable[[str], None] = print,
    ) -> None:
        runner = runner or SubprocessRunner()
        self.settings = settings
        self.prompter = prompter
        self.clasp = ClaspTool(runner, settings)
        self.npm = PackageManager(runner, settings)
        self.state = SetupState.START
        self._echo = echo

    def _require(self, state: SetupState) -> None:
        """Raise unless the wizard may move to state. Checked before a step acts."""
        if self.state in TERMINAL_STATES:
            raise IllegalTransitionError(f"Wizard already finished ({self.state})")
        if _ORDER.index(state) <= _ORDER.index(self.state) and state not in TERMINAL_STATES:
            raise IllegalTransitionError(f"Cannot move from {self.state} back to {state}")

    def _advance(self, state: SetupState) -> None:
        self._require(state)
        logger.debug("State {} -> {}", self.state, state)
        self.state = state
        set_step(str(state))

    # --- Steps ---

    def ensure_dependencies(self) -> bool:
        """Run `npm install` if node_modules is missing.

        Returns:
            True if the installer ran.

        Raises:
            InstallError: With the installer's exit code if it fails.
        """
        self._require(SetupState.DEPENDENCIES_ENSURED)
        installed = False
        if not self.settings.deps_path.exists():
            self._echo("Installing dependencies...")
            self.npm.install(self.settings.project_dir)
            self._echo("")
            installed = True
        self._advance(SetupState.DEPENDENCIES_ENSURED)
        return installed

    def ensure_tool_available(self) -> bool:
        """Install clasp globally if `clasp --version` fails.

        Returns:
            True if clasp was installed.

        Raises:
            CommandError: If the global install fails (exit 1).
        """
        self._require(SetupState.TOOL_ENSURED)
        installed = False
        if not self.clasp.is_available():
            self._echo("⚠️  clasp is not installed globally.")
            self._echo(f"Installing {self.settings.clasp_package} globally...")
            self.npm.install_global(self.settings.clasp_package)
            self._echo("")
            installed = True
        self._advance(SetupState.TOOL_ENSURED)
        return installed

    def check_existing_binding(self) -> bool:
        """Ask before reconfiguring an already bound project.

        Returns:
            True if a binding file already existed (and the user chose to
            reconfigure).

        Raises:
            SetupCancelled: If the user declines to reconfigure.
        """
        self._require(SetupState.BINDING_CHECKED)
        exists = self.settings.binding_path.exists()
        if exists:
            confirm_or_exit(
                self.prompter,
                f"{self.settings.binding_filename} already exists. "
                "Do you want to reconfigure?",
                default=False,
                on_decline="Setup cancelled.",
            )
        self._advance(SetupState.BINDING_CHECKED)
        return exists

    def check_authentication(self) -> bool:
        """Make sure clasp has a logged-in session.

        Returns:
            True if a login was performed now, False if already logged in.

        Raises:
            SetupCancelled: If the user declines to log in.
        """
        self._require(SetupState.AUTHENTICATED)
        if self.clasp.is_logged_in():
            self._echo("✓ You are already logged in to Google Apps Script")
            self._advance(SetupState.AUTHENTICATED)
            return False

        self._echo("You need to log in to Google Apps Script.")
        confirm_or_exit(
            self.prompter,
            "Do you want to log in now?",
            default=True,
            on_decline=f"You can log in later using: {LOGIN_RESUME_COMMAND}",
        )
        self._echo("Opening browser for authentication...")
        self.clasp.login()
        self._echo("")
        self._advance(SetupState.AUTHENTICATED)
        return True

    def select_project_mode(self) -> ProjectMode:
        self._require(SetupState.MODE_SELECTED)
        mode = self.prompter.select(
            "How would you like to set up your project?",
            [
                ("Create a new Google Spreadsheet with Apps Script", ProjectMode.NEW),
                ("Use an existing Google Spreadsheet", ProjectMode.EXISTING),
            ],
        )
        self._advance(SetupState.MODE_SELECTED)
        return ProjectMode(mode)

    def provision_new(self, spreadsheet_name: str | None = None) -> str:
        """Create a standalone script project with clasp.

        Args:
            spreadsheet_name: Title prefix; prompted for when None.

        Returns:
            The new project's script ID.

        Raises:
            CommandError: If `clasp create` fails. Nothing created
                remotely is cleaned up; a binding moved aside is put back.
            IdentifierNotFound: If the ID cannot be recovered.
        """
        self._require(SetupState.PROVISIONED)
        if spreadsheet_name is None:
            spreadsheet_name = self.prompter.text(
                "Enter a name for your spreadsheet:",
                default=self.settings.default_spreadsheet_name,
            )
        title = f"{spreadsheet_name} - Script"

        # clasp create refuses to run over an existing .clasp.json
        binding_path = self.settings.binding_path
        backup = None
        if binding_path.exists():
            backup = binding_path.with_name(binding_path.name + ".bak")
            binding_path.replace(backup)
            self._echo(f"Moved existing {binding_path.name} to {backup.name}")

        self._echo("")
        self._echo("Creating new spreadsheet and Apps Script project...")
        try:
            created = self.clasp.create(title, self.settings.project_dir)
            self._echo(created.output)

            binding = load_binding(binding_path)
            script_id = resolve_script_id(
                binding, created.output, binding_filename=self.settings.binding_filename
            )
        except SetupError:
            if backup is not None:
                backup.replace(binding_path)
                logger.debug("Restored {} from {}", binding_path.name, backup.name)
            raise

        self._echo("")
        self._echo("✓ Project created successfully!")
        self._echo("")
        self._echo("IMPORTANT NEXT STEPS:")
        self._echo("1. Open your Apps Script project: clasp open")
        self._echo("2. Manually create a new Google Spreadsheet")
        self._echo("3. In the spreadsheet, go to Extensions > Apps Script")
        self._echo("4. Copy the Script ID from the URL")
        self._echo(f"5. Update {self.settings.binding_filename} with that Script ID")
        self._echo("6. Run: clasp push")
        self._echo("")

        self._advance(SetupState.PROVISIONED)
        return script_id

    def provision_existing(self) -> str:
        """Bind to an existing script project by ID.

        Returns:
            The script ID written to the binding file.
        """
        self._require(SetupState.PROVISIONED)
        self._echo("")
        self._echo("To use an existing spreadsheet:")
        self._echo("1. Open your Google Spreadsheet")
        self._echo("2. Go to Extensions > Apps Script")
        self._echo("3. Copy the Script ID from the URL (between /d/ and /edit)")
        self._echo("")

        answer = self.prompter.text(
            "Enter the Script ID:",
            validate=require_non_empty("Please enter a valid Script ID"),
        )
        script_id = parse_script_id(answer)

        binding = DeploymentBinding(script_id=script_id, root_dir=self.settings.source_root)
        write_binding(self.settings.binding_path, binding)
        self._echo(f"✓ Created {self.settings.binding_filename}")

        self._advance(SetupState.PROVISIONED)
        return script_id

    def materialize_aux_files(self) -> list[Path]:
        """Write .claspignore and appsscript.json unless they exist.

        Returns:
            Paths of the files written by this call.
        """
        if self.state in TERMINAL_STATES:
            raise IllegalTransitionError(f"Wizard already finished ({self.state})")
        written: list[Path] = []

        if write_ignore_list(self.settings.ignore_path):
            self._echo(f"✓ Created {self.settings.ignore_filename}")
            written.append(self.settings.ignore_path)

        manifest = DeploymentManifest(time_zone=self.settings.time_zone)
        if write_manifest(self.settings.manifest_path, manifest):
            self._echo(f"✓ Created {self.settings.manifest_filename}")
            written.append(self.settings.manifest_path)

        if self.state == SetupState.PROVISIONED:
            self._advance(SetupState.AUX_FILES_WRITTEN)
        return written

    def print_completion_summary(self) -> None:
        self._echo("")
        self._echo("Setup complete!")
        self._echo("")
        self._echo("Next steps:")
        self._echo("1. Push your code to Google Apps Script: clasp push")
        self._echo(
            "2. Open your spreadsheet and run the setup wizard "
            "from the Publications menu"
        )
        self._echo("3. Configure your API keys and institution settings")
        self._echo("")
        self._echo("For more information, see the README.md file.")
        self._echo("")

    # --- Full run ---

    def run(
        self,
        *,
        skip_install: bool = False,
        spreadsheet_name: str | None = None,
    ) -> SetupResult:
        """Run every step in order.

        SetupCancelled is turned into a CANCELLED result. SetupError
        propagates after the wizard is marked FATAL so the caller can
        report the underlying message and exit code.
        """
        try:
            if skip_install:
                self._advance(SetupState.DEPENDENCIES_ENSURED)
            else:
                self.ensure_dependencies()
            self.ensure_tool_available()
            self.check_existing_binding()
            self.check_authentication()
            self._echo("")

            mode = self.select_project_mode()
            if mode == ProjectMode.NEW:
                script_id = self.provision_new(spreadsheet_name)
            else:
                script_id = self.provision_existing()

            written = self.materialize_aux_files()
            self.print_completion_summary()
            self._advance(SetupState.DONE)
        except SetupCancelled as e:
            logger.debug("Setup cancelled at {}", self.state)
            self._advance(SetupState.CANCELLED)
            return SetupResult(state=SetupState.CANCELLED, message=e.message)
        except SetupError:
            logger.debug("Setup failed at {}", self.state)
            self._advance(SetupState.FATAL)
            raise
        finally:
            set_step(None)

        return SetupResult(
            state=SetupState.DONE,
            script_id=script_id,
            mode=mode,
            files_written=written,
        )
