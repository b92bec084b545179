"""CLI entry point for pubtracker_setup.

Usage:
    python -m pubtracker_setup [setup] [--skip-install] [--name NAME]
    python -m pubtracker_setup login
    python -m pubtracker_setup status

Global options:
    --project-dir DIR   Apps Script project directory (default: cwd)
    --verbose           Debug logging
    --json-logs         One JSON object per log line on stderr
"""

from __future__ import annotations

import argparse
import sys

from loguru import logger

from pubtracker_setup.clasp import ClaspTool
from pubtracker_setup.config import SetupSettings
from pubtracker_setup.errors import BindingError, SetupCancelled, SetupError
from pubtracker_setup.files import load_binding
from pubtracker_setup.logging import setup_logging
from pubtracker_setup.prompts import QuestionaryPrompter
from pubtracker_setup.runner import SubprocessRunner
from pubtracker_setup.wizard import SetupState, SetupWizard


def _load_settings(args: argparse.Namespace) -> SetupSettings:
    if args.project_dir:
        return SetupSettings(project_dir=args.project_dir)
    return SetupSettings()


# --- Command handlers ---


def cmd_setup(args: argparse.Namespace, settings: SetupSettings) -> int:
    """Run the full setup wizard."""
    print("=" * 60)
    print("Publication Tracker - Setup Script")
    print("=" * 60)
    print()
    print("This script will help you set up the Publication Tracker.")
    print()

    wizard = SetupWizard(settings, QuestionaryPrompter())
    result = wizard.run(skip_install=args.skip_install, spreadsheet_name=args.name)
    if result.state == SetupState.CANCELLED:
        print(result.message)
    return result.exit_code


def cmd_login(_args: argparse.Namespace, settings: SetupSettings) -> int:
    """Log clasp in to Google Apps Script."""
    clasp = ClaspTool(SubprocessRunner(), settings)
    print("Opening browser for authentication...")
    clasp.login()
    print("✓ Logged in to Google Apps Script")
    return 0


def cmd_status(_args: argparse.Namespace, settings: SetupSettings) -> int:
    """Report tool, login and file state without changing anything."""
    clasp = ClaspTool(SubprocessRunner(), settings)

    def _yes_no(flag: bool) -> str:
        return "yes" if flag else "no"

    available = clasp.is_available()
    print(f"Project directory: {settings.project_dir}")
    print(f"clasp installed:   {_yes_no(available)}")
    if available:
        print(f"Logged in:         {_yes_no(clasp.is_logged_in())}")

    try:
        binding = load_binding(settings.binding_path)
    except BindingError as e:
        print(f"{settings.binding_filename + ':':<19}invalid ({e})")
    else:
        if binding is None:
            print(f"{settings.binding_filename + ':':<19}missing")
        else:
            print(f"{settings.binding_filename + ':':<19}scriptId {binding.script_id or '(empty)'}")

    for path in (settings.ignore_path, settings.manifest_path):
        state = "present" if path.exists() else "missing"
        print(f"{path.name + ':':<19}{state}")
    return 0


# --- CLI setup ---


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pubtracker-setup",
        description="Set up the local clasp environment for the Publication Tracker",
    )
    parser.add_argument(
        "--project-dir",
        default=None,
        help="Apps Script project directory (or set PUBTRACKER_PROJECT_DIR)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Write logs to stderr as JSON lines",
    )
    parser.set_defaults(func=cmd_setup, skip_install=False, name=None)

    subparsers = parser.add_subparsers(dest="command")

    # setup
    setup_parser = subparsers.add_parser("setup", help="Run the setup wizard (default)")
    setup_parser.add_argument(
        "--skip-install",
        action="store_true",
        help="Don't run npm install even if node_modules is missing",
    )
    setup_parser.add_argument(
        "--name",
        default=None,
        help="Spreadsheet name for a new project (skips the prompt)",
    )
    setup_parser.set_defaults(func=cmd_setup)

    # login
    login_parser = subparsers.add_parser(
        "login", help="Log in to Google Apps Script (opens browser)"
    )
    login_parser.set_defaults(func=cmd_login)

    # status
    status_parser = subparsers.add_parser(
        "status", help="Show clasp and configuration file status"
    )
    status_parser.set_defaults(func=cmd_status)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = _load_settings(args)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(
        json_logs=args.json_logs or settings.json_logs,
        log_level="DEBUG" if args.verbose else settings.log_level,
    )

    try:
        result: int = args.func(args, settings)
        return result
    except SetupCancelled as e:
        print(e.message)
        return 0
    except SetupError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        print("\nSetup cancelled by user", file=sys.stderr)
        return 1
    except Exception as e:
        logger.opt(exception=True).debug("Unhandled error")
        print(f"Setup failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
