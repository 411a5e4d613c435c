# core/logging_config.py

import logging
import os
from logging import Formatter, Handler, Logger, StreamHandler
from logging.handlers import TimedRotatingFileHandler
from typing import Optional

from colorlog import ColoredFormatter
from pythonjsonlogger.json import JsonFormatter

from shared.core.config import settings

ENVIRONMENT = settings.ENVIRONMENT.lower()
LOG_LEVEL = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
HUMAN_READABLE = ENVIRONMENT in ("local", "development")

os.makedirs(settings.LOG_DIR, exist_ok=True)
# Rotation appends the date suffix to rolled-over files
LOG_FILE_PATH = os.path.join(
    settings.LOG_DIR, f"{settings.APP_NAME.replace(' ', '_').lower()}.log"
)

_LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}

_shared_file_handler: Optional[Handler] = None


def _console_formatter() -> Formatter:
    if HUMAN_READABLE:
        return ColoredFormatter(
            "%(log_color)s%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d "
            "| %(message)s%(reset)s",
            datefmt="%H:%M:%S",
            reset=True,
            log_colors=_LOG_COLORS,
        )
    return JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s %(lineno)d",
        rename_fields={"levelname": "level", "asctime": "time"},
    )


def _file_handler() -> Handler:
    """One rotating file handler for every logger in the process."""
    global _shared_file_handler
    if _shared_file_handler is None:
        handler = TimedRotatingFileHandler(
            filename=LOG_FILE_PATH,
            when="midnight",
            backupCount=settings.LOG_BACKUP_DAYS,
            encoding="utf-8",
            utc=True,
        )
        handler.setFormatter(
            JsonFormatter(
                "%(asctime)s %(levelname)s %(name)s %(message)s "
                "%(pathname)s %(lineno)d"
            )
        )
        _shared_file_handler = handler
    return _shared_file_handler


def get_logger(name: str) -> Logger:
    """Return a configured logger; handlers are attached once per name."""
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(LOG_LEVEL)

    console_handler = StreamHandler()
    console_handler.setFormatter(_console_formatter())
    logger.addHandler(console_handler)
    logger.addHandler(_file_handler())

    # Handlers live on each named logger, so the root must not repeat them
    logger.propagate = False
    return logger


# ExecutionTimeMiddleware already logs every request
logging.getLogger("uvicorn.access").disabled = True
