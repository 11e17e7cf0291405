"""
Logging setup shared by every fleet_ledger module.

Records go to stderr and to a size-rotated file under LOG_DIR. Chatty
third-party loggers (SQL echo, HTTP client, access log) are held at WARNING
unless LOG_LEVEL is DEBUG.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from fleet_ledger.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
NOISY_LOGGERS = ("sqlalchemy.engine", "httpx", "httpcore", "uvicorn.access")

_ready = False


def _file_handler(level: str, formatter: logging.Formatter) -> logging.Handler:
    log_dir = settings.LOG_DIR or os.path.join(os.getcwd(), "logs")
    os.makedirs(log_dir, exist_ok=True)
    handler = RotatingFileHandler(
        filename=os.path.join(log_dir, settings.LOG_FILE),
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging():
    """Attach the fleet_ledger handlers to the root logger (idempotent)."""
    global _ready
    if _ready:
        return
    _ready = True

    level = settings.LOG_LEVEL.upper()
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    stream = logging.StreamHandler()
    stream.setLevel(level)
    stream.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(stream)
    if settings.LOG_TO_FILE:
        root.addHandler(_file_handler(level, formatter))

    if level != "DEBUG":
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)
