"""Logger setup for command-line runs."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from asr_pipeline.config import LOGGING, get_log_level


def setup_logger(log_level: str | None = None, log_dir: Path | None = None) -> logging.Logger:
    """Configure root logging for a CLI run.

    Library modules only create module-level loggers; handlers are installed
    here so embedding applications keep control of their own logging.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR). Defaults
            to :func:`asr_pipeline.config.get_log_level`.
        log_dir: Directory for the log file. When ``None`` only stderr is used,
            keeping stdout free for command output.

    Returns:
        The package logger.
    """

    level_name = (log_level or get_log_level()).upper()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / LOGGING["file_name"], encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOGGING["format"],
        handlers=handlers,
        force=True,
    )
    return logging.getLogger("asr_pipeline")
