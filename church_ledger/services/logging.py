"""Logging setup for the ledger API.

Log lines go to stdout and, when a log file is configured, to that file as
well. The LOG_LEVEL environment variable overrides the configured level.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty third-party loggers; SQL echo has its own DATABASE_ECHO switch
QUIET_LOGGERS = ("sqlalchemy.engine", "googleapiclient.discovery_cache", "httpx")


def get_log_level(default: str = "INFO") -> int:
    """Resolve LOG_LEVEL (or `default`) to a logging constant; unknown names mean INFO."""
    level = logging.getLevelName(os.getenv("LOG_LEVEL", default).strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_server_logging(log_file: Optional[str] = "logs/server.log", default_level: str = "INFO") -> None:
    """
    Configure the root logger for the API server.

    Args:
        log_file: Log file path; None logs to stdout only
        default_level: Level name used when LOG_LEVEL is not set
    """
    level = get_log_level(default_level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
