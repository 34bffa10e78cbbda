import logging
import os
from logging.config import dictConfig
from typing import Any, Dict, Optional

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Console logging for seed runs; ``SANDBOX_LOG_FILE`` adds a copy on disk.

    httpx request lines stay at WARNING unless ``SANDBOX_DEBUG_HTTP=1``;
    ``SANDBOX_DEBUG_SQL=1`` echoes SQL through the ``sqlalchemy.engine`` logger.
    """
    root_level = (level or os.getenv("SANDBOX_LOG_LEVEL", "INFO")).upper()
    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": "ext://sys.stderr",
        },
    }
    log_file = os.getenv("SANDBOX_LOG_FILE")
    if log_file:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "default",
            "filename": log_file,
            "encoding": "utf-8",
        }

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": DEFAULT_LOG_FORMAT}},
            "handlers": handlers,
            "loggers": {
                "httpx": {"level": "DEBUG" if os.getenv("SANDBOX_DEBUG_HTTP", "0") == "1" else "WARNING"},
            },
            "root": {"handlers": list(handlers), "level": root_level},
        }
    )

    if os.getenv("SANDBOX_DEBUG_SQL", "0") == "1":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
