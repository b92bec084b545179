"""Logging configuration using loguru.

Provides:
- Human-readable logging for interactive runs
- Structured JSON logging for CI and scripted runs
- A step context so every record carries the wizard step it came from

Logs go to stderr; stdout is reserved for the wizard's conversation.
"""

import json
import sys
from contextvars import ContextVar
from datetime import UTC, datetime

from loguru import logger

step_ctx: ContextVar[str | None] = ContextVar("step", default=None)


def _json_formatter(record: dict) -> str:
    """Format log record as a single JSON line."""
    log_entry = {
        "timestamp": datetime.now(UTC).isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }

    step = step_ctx.get()
    if step:
        log_entry["step"] = step

    if record.get("extra"):
        for key, value in record["extra"].items():
            if key not in log_entry:
                log_entry[key] = value

    if record["exception"]:
        log_entry["exception"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else None,
            "value": str(record["exception"].value) if record["exception"].value else None,
        }

    # loguru treats the returned string as a format template
    return json.dumps(log_entry, default=str).replace("{", "{{").replace("}", "}}") + "\n"


def _dev_formatter(_record: dict) -> str:
    """Format log record for terminals (human-readable)."""
    step = step_ctx.get()
    step_str = f"[{step}] " if step else ""

    return (
        "<green>{time:HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> | "
        + step_str
        + "<level>{message}</level>\n"
        "{exception}"
    )


def setup_logging(json_logs: bool = False, log_level: str = "INFO") -> None:
    """Configure loguru for the wizard.

    Args:
        json_logs: If True, output one JSON object per line
        log_level: Minimum log level to output
    """
    logger.remove()

    if json_logs:
        logger.add(
            sys.stderr,
            format=_json_formatter,
            level=log_level,
            serialize=False,
        )
    else:
        logger.add(
            sys.stderr,
            format=_dev_formatter,
            level=log_level,
            colorize=True,
        )


def set_step(step: str | None) -> None:
    """Record the wizard step for subsequent log records."""
    step_ctx.set(step)


__all__ = [
    "logger",
    "set_step",
    "setup_logging",
    "step_ctx",
]
