import logging
import os
from logging.config import dictConfig
from typing import Optional

# Per-calculation audit lines (inputs, breakdown, warnings) go to this logger
DOSE_LOGGER = "mealdose.dose"


def configure_logging(level: Optional[str] = None) -> None:
    log_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    dose_level = os.environ.get("DOSE_LOG_LEVEL", log_level).upper()
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structured": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S%z",
                },
                "dose": {
                    "format": "%(asctime)s %(levelname)s [DOSE] %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S%z",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "structured",
                    "level": log_level,
                },
                "dose_console": {
                    "class": "logging.StreamHandler",
                    "formatter": "dose",
                    "level": dose_level,
                },
            },
            "loggers": {
                "uvicorn": {"handlers": ["console"], "level": log_level},
                "uvicorn.access": {"handlers": ["console"], "level": log_level, "propagate": False},
                DOSE_LOGGER: {"handlers": ["dose_console"], "level": dose_level, "propagate": False},
            },
            "root": {"handlers": ["console"], "level": log_level},
        }
    )
    logging.getLogger(__name__).debug("Logging configured", extra={"level": log_level})


__all__ = ["DOSE_LOGGER", "configure_logging"]
