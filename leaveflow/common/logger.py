"""Logging infrastructure for leaveflow.

Every module asks for a named logger under the ``leaveflow`` namespace;
handlers are attached once, at application start, by ``setup_logger``.
Timestamps are ISO 8601.
"""

import logging
import logging.handlers
import os
from typing import List, Optional

ROOT_LOGGER = "leaveflow"

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _build_handlers(
    name: str,
    log_dir: str,
    file_logging: bool,
    console_logging: bool,
    max_bytes: int,
    backup_count: int,
) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []

    if file_logging:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                os.path.join(log_dir, f"{name}.log"),
                maxBytes=max_bytes,
                backupCount=backup_count,
            )
        )

    if console_logging:
        handlers.append(logging.StreamHandler())

    return handlers


def setup_logger(
    name: str = ROOT_LOGGER,
    log_dir: str = "logs",
    level: str = "INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    file_logging: bool = False,
    console_logging: bool = True,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """Configure a logger and attach its handlers.

    Called with the defaults it configures the ``leaveflow`` logger, which
    every engine, service and API logger propagates to.

    Args:
        name: Logger name
        log_dir: Directory for the rotating ``<name>.log`` file
        level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL (any case)
        log_format: Record format, ``DEFAULT_FORMAT`` if omitted
        date_format: Timestamp format, ``DEFAULT_DATE_FORMAT`` if omitted
        file_logging: Also write to a size-rotated file
        console_logging: Write to stderr
        max_bytes: File size that triggers rotation
        backup_count: Rotated files kept

    Returns:
        The configured logger

    Raises:
        ValueError: On an unknown level name
    """
    level_name = level.upper()
    if level_name not in LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of: {', '.join(LEVELS)}")

    logger = logging.getLogger(name)
    logger.setLevel(level_name)

    # Already configured: only the level may change
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        log_format or DEFAULT_FORMAT,
        datefmt=date_format or DEFAULT_DATE_FORMAT,
    )
    for handler in _build_handlers(name, log_dir, file_logging, console_logging, max_bytes, backup_count):
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger below the ``leaveflow`` namespace.

    ``get_logger("approval_engine")`` returns ``leaveflow.approval_engine``;
    names already inside the namespace are used as they are.
    """
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
