"""pubtracker_setup - interactive setup for the Publication Tracker.

Installs dependencies, logs clasp in, creates or binds the Apps Script
project and writes .clasp.json, .claspignore and appsscript.json.
"""

__version__ = "0.1.0"

from pubtracker_setup.clasp import ClaspTool, PackageManager, parse_script_id
from pubtracker_setup.config import SetupSettings
from pubtracker_setup.errors import (
    BindingError,
    CommandError,
    IdentifierNotFound,
    InstallError,
    SetupCancelled,
    SetupError,
    ToolNotFoundError,
)
from pubtracker_setup.files import DeploymentBinding, DeploymentManifest, IgnoreList
from pubtracker_setup.prompts import Prompter, QuestionaryPrompter, confirm_or_exit
from pubtracker_setup.runner import CommandResult, CommandRunner, SubprocessRunner
from pubtracker_setup.wizard import ProjectMode, SetupResult, SetupState, SetupWizard

__all__ = [
    "BindingError",
    "ClaspTool",
    "CommandError",
    "CommandResult",
    "CommandRunner",
    "DeploymentBinding",
    "DeploymentManifest",
    "IdentifierNotFound",
    "IgnoreList",
    "InstallError",
    "PackageManager",
    "ProjectMode",
    "Prompter",
    "QuestionaryPrompter",
    "SetupCancelled",
    "SetupError",
    "SetupResult",
    "SetupSettings",
    "SetupState",
    "SetupWizard",
    "SubprocessRunner",
    "ToolNotFoundError",
    "__version__",
    "confirm_or_exit",
    "parse_script_id",
]
