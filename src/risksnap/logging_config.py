"""Logging configuration for risk snapshot runs.

Console output goes to stderr so ``--output json`` on stdout stays
machine-readable. A log file, when requested, always records DEBUG detail
(extracted signal summaries, fetch retries) regardless of the console level.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# HTTP stack loggers that are chatty at INFO/DEBUG
QUIET_LOGGERS = ("urllib3", "charset_normalizer", "requests")


def _resolve_level(level: str) -> Optional[int]:
    numeric_level = logging.getLevelName(level.upper())
    return numeric_level if isinstance(numeric_level, int) else None


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """Configure logging for risk snapshot runs.

    Args:
        level: Console log level name; unknown names fall back to INFO
        log_file: Optional log file path (parent directories are created)
        format_string: Optional format applied to every handler

    Returns:
        The ``risksnap`` package logger
    """
    resolved = _resolve_level(level)
    console_level = logging.INFO if resolved is None else resolved

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(format_string or CONSOLE_FORMAT))
    handlers = [console]
    root_level = console_level

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(format_string or FILE_FORMAT))
        handlers.append(file_handler)
        root_level = logging.DEBUG

    logging.basicConfig(level=root_level, handlers=handlers, force=True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if resolved is None:
        logging.getLogger(__name__).warning(f"Unknown log level {level!r}, using INFO")

    return logging.getLogger("risksnap")
