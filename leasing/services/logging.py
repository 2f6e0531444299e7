"""Logging setup shared by the API server and the payment generation job.

Every record goes to stdout and, when a log file is configured, to that file
as well. Level and file come from ``settings`` (``LOG_LEVEL``, ``LOG_FILE``).
"""

import logging
import sys
from pathlib import Path

from leasing.config import settings

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that log every request or query at INFO
QUIET_LOGGERS = ("httpx", "sqlalchemy.engine", "aiosqlite")


def resolve_level(name: str | None) -> int:
    """Level constant for a level name such as ``"debug"``; unknown names mean INFO."""
    level = logging.getLevelName(str(name or "").upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(log_file: str | None = None, level: str | None = None) -> int:
    """Route the root logger to stdout and the log file.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        log_file: Log file path; defaults to ``settings.log_file``, empty disables the file
        level: Level name; defaults to ``settings.log_level``

    Returns:
        The level applied
    """
    log_level = resolve_level(settings.log_level if level is None else level)
    path = settings.log_file if log_file is None else log_file

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if path:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
    return log_level
