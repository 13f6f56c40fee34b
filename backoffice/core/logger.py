"""Logging for the back office.

Everything of interest happens at startup or under an admin's hand: the
role migration (steps applied, members repaired, failures that leave the
service degraded), the bootstrap seed, and role or menu edits stamped with
the acting login id. All of it is logged through ``logging.getLogger(__name__)``
inside the ``backoffice`` package, so wiring handlers onto that one logger
at startup is enough.

Console output is always on. A rotating file is added only when
``log_dir`` is configured; containers usually leave it unset.
"""

import logging
import logging.handlers
import os
from typing import Optional

from backoffice.core.config import Settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _resolve_level(level: str) -> int:
    name = level.upper()
    if name not in _LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of: {', '.join(_LEVELS)}")
    return getattr(logging, name)


def _file_handler(name: str, log_dir: str) -> logging.Handler:
    os.makedirs(log_dir, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, f"{name}.log"),
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
    )


def setup_logger(
    name: str = "backoffice",
    log_dir: Optional[str] = None,
    level: str = "INFO",
) -> logging.Logger:
    """Attach console (and optional file) handlers to the ``name`` logger.

    Calling it again only updates the level, so app factories built more
    than once per process (tests do this) never stack handlers.
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))

    if logger.handlers:
        return logger

    handlers = [logging.StreamHandler()]
    if log_dir:
        handlers.append(_file_handler(name, log_dir))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def configure_logging(settings: Settings) -> logging.Logger:
    """Package logger configured from ``LOG_LEVEL`` and ``LOG_DIR``."""
    return setup_logger("backoffice", log_dir=settings.log_dir, level=settings.log_level)
