"""Logging setup for toolchat runs.

Each run may write to ``~/.toolchat/logs/<run_id>.log``. The run logger is
isolated (no propagation) and avoids duplicate handlers across repeated
initializations.
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from uuid import uuid4

from toolchat.config import LogLevel
from toolchat.paths import get_toolchat_home


def generate_run_id(now: datetime | None = None) -> str:
    """Return a run id in the form YYYYMMDDHHMM-uuid4.

    ``now`` exists to ease testing and determinism; it defaults to current UTC.
    """

    instant = now or datetime.now(UTC)
    timestamp = instant.strftime("%Y%m%d%H%M")
    return f"{timestamp}-{uuid4()}"


def run_log_path(run_id: str, base_dir: Path | None = None) -> Path:
    directory = base_dir or get_toolchat_home() / "logs"
    return directory / f"{run_id}.log"


def configure_run_logger(
    run_id: str,
    *,
    log_level: LogLevel | str = LogLevel.INFO,
    base_dir: Path | None = None,
) -> logging.Logger:
    """Configure and return a file logger scoped to a run.

    Subsequent calls with the same run_id return the same logger without
    duplicating handlers.
    """

    logger = logging.getLogger(f"toolchat.run.{run_id}")

    level_value = _to_logging_level(log_level)
    logger.setLevel(level_value)
    logger.propagate = False

    if not logger.handlers:
        path = run_log_path(run_id, base_dir)
        path.parent.mkdir(parents=True, exist_ok=True)

        handler = logging.FileHandler(path, encoding="utf-8")
        handler.setLevel(level_value)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)

    return logger


def configure_base_logging(*, debug_enabled: bool, toolchat_level: LogLevel | str) -> None:
    """Route console logging to stderr; ``--debug`` raises the root level to INFO."""

    root_level = logging.INFO if debug_enabled else logging.WARNING

    logging.basicConfig(
        level=root_level,
        stream=sys.__stderr__,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )

    logging.getLogger("toolchat").setLevel(_to_logging_level(toolchat_level))

    # Client libraries are chatty at INFO; keep them off the console.
    for noisy in ("httpx", "httpcore", "openai"):
        logger = logging.getLogger(noisy)
        logger.setLevel(logging.WARNING)
        logger.propagate = False


def _to_logging_level(value: LogLevel | str) -> int:
    mapping = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
    }
    if isinstance(value, LogLevel):
        return mapping[value]
    if isinstance(value, str):
        try:
            return mapping[LogLevel(value)]
        except ValueError:
            return logging.WARNING
    return logging.WARNING


__all__ = [
    "configure_base_logging",
    "configure_run_logger",
    "generate_run_id",
    "run_log_path",
    "_to_logging_level",
]
