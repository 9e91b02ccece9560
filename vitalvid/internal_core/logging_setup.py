from __future__ import annotations

import logging.config
from typing import Any


def build_logging_config(log_level: str = "INFO") -> dict[str, Any]:
    level = str(log_level or "INFO").upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {
                "format": "%(asctime)s level=%(levelname)s logger=%(name)s %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "plain",
            },
        },
        "loggers": {
            "vitalvid": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
        },
    }


def configure_logging(log_level: str = "INFO") -> None:
    logging.config.dictConfig(build_logging_config(log_level))
