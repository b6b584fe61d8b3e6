"""
Logging Configuration Module.

Central stdlib logging setup for the Diligence Labs API. Output settings come
from the ``settings.log`` view (``DILIGENCE_LOG_LEVEL``, ``LOG_FORMAT``,
``LOG_FILE_DIR``, ``ENABLE_FILE_LOGGING``); every module then obtains its
logger through :func:`get_logger`.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"

JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"module": "%(filename)s", "function": "%(funcName)s", "line": %(lineno)d, '
    '"message": "%(message)s"}'
)

FORMATS: Dict[str, str] = {"simple": SIMPLE_FORMAT, "detailed": DETAILED_FORMAT, "json": JSON_FORMAT}

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILE_NAME = "diligence_labs.log"

MODULE_LOG_LEVELS = {
    "diligence_labs.core": "INFO",
    "diligence_labs.core.database": "INFO",
    "diligence_labs.core.security": "INFO",
    "diligence_labs.server": "INFO",
    "diligence_labs.server.api": "DEBUG",
    "diligence_labs.server.services": "DEBUG",
    # Message bodies are logged when SMTP is unset
    "diligence_labs.server.services.email": "INFO",
    "diligence_labs.server.core": "INFO",
    # Third-party noise
    "sqlalchemy": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "sqlalchemy.pool": "WARNING",
    "aiosqlite": "WARNING",
    "httpx": "WARNING",
    "asyncio": "WARNING",
    "uvicorn": "INFO",
    "uvicorn.access": "INFO",
}


def _log_settings():
    # Deferred so core modules import without the server settings
    from diligence_labs.server.core.config import settings

    return settings.log


def _build_handlers(level: str, formatter: logging.Formatter, file_dir: Optional[str]) -> List[logging.Handler]:
    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    handlers: List[logging.Handler] = [console]

    if file_dir:
        directory = Path(file_dir)
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(directory / LOG_FILE_NAME)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    return handlers


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: bool = True,
) -> None:
    """
    Configure the root logger and the per-module levels.

    Safe to call more than once; previous root handlers are replaced.

    Args:
        log_level: Console level override (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format override (simple, detailed, json); unknown names fall back to detailed
        enable_file: Allow the file handler when ``ENABLE_FILE_LOGGING`` is on
    """
    config = _log_settings()
    level = (log_level or config.level).upper()
    fmt = log_format or config.format
    file_dir = config.file_dir if enable_file and config.file_enabled else None

    formatter = logging.Formatter(FORMATS.get(fmt, DETAILED_FORMAT), datefmt=DATE_FORMAT)

    # Handlers filter by level, the root passes everything through
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in _build_handlers(level, formatter, file_dir):
        root_logger.addHandler(handler)

    for module_name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(module_name).setLevel(module_level)

    root_logger.info(f"Logging configured: level={level}, format={fmt}, file_logging={file_dir is not None}")


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, usually called with ``__name__``."""
    return logging.getLogger(name)
