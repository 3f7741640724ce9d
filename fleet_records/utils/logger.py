# fleet_records/utils/logger.py
"""
Logging setup shared by every module.

Records go to stderr and to fleet_records.log under LOG_DIR (rotated at
5 MB, ten backups kept). Handlers are attached to the root logger once, the
first time any module asks for a logger.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from fleet_records.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "fleet_records.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 10


def _handlers(level: str, log_dir: str) -> list[logging.Handler]:
    os.makedirs(log_dir, exist_ok=True)
    handlers = [
        logging.StreamHandler(),
        RotatingFileHandler(
            os.path.join(log_dir, LOG_FILE_NAME),
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUPS,
            encoding="utf-8",
        ),
    ]
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def configure_logging(level: str | None = None, log_dir: str | None = None):
    """Attach the console and file handlers to the root logger. Idempotent."""
    root = logging.getLogger()
    if getattr(root, "_fleet_records_configured", False):
        return
    level = (level or settings.LOG_LEVEL).upper()
    root.setLevel(level)
    for handler in _handlers(level, log_dir or settings.LOG_DIR):
        root.addHandler(handler)
    root._fleet_records_configured = True


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
