"""Console logging for the command line host."""

import logging.config
import sys


def configure_logging(level: str = "INFO") -> None:
    """Route every logger through one stderr handler at ``level``."""

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "stream": sys.stderr,
            },
        },
        "loggers": {
            "": {
                "handlers": ["console"],
                "level": level,
            },
        },
    }

    logging.config.dictConfig(logging_config)
