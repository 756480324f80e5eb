"""
logging_config.py

PURPOSE: Logging setup for the service.
DEPENDENCIES: rich

ARCHITECTURE NOTES:
Two kinds of output:
- Diagnostics go through the root logger with a RichHandler
- Trace lines go to a dedicated logger with a bare "%(message)s" format,
  so each line is exactly the pipe-delimited record and nothing else
"""

import logging
import logging.config

TRACE_LOGGER_NAME = "driver_trace_service.trace"


def setup_logging(log_level: str = "INFO", debug: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        log_level: Level for diagnostic output (DEBUG, INFO, ...).
        debug: Force DEBUG level and show file paths in diagnostics.
    """
    level = "DEBUG" if debug else log_level.upper()

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "rich": {"format": "%(message)s", "datefmt": "[%X]"},
                "trace": {"format": "%(message)s"},
            },
            "handlers": {
                "console": {
                    "()": "rich.logging.RichHandler",
                    "formatter": "rich",
                    "show_path": debug,
                    "rich_tracebacks": True,
                },
                "trace": {
                    "class": "logging.StreamHandler",
                    "formatter": "trace",
                    "stream": "ext://sys.stdout",
                },
            },
            "loggers": {
                TRACE_LOGGER_NAME: {
                    "level": "INFO",
                    "handlers": ["trace"],
                    "propagate": False,
                },
                "httpx": {"level": "WARNING"},
                "httpcore": {"level": "WARNING"},
            },
            "root": {
                "level": level,
                "handlers": ["console"],
            },
        }
    )


def get_trace_logger() -> logging.Logger:
    """Return the logger that trace lines are written to."""
    return logging.getLogger(TRACE_LOGGER_NAME)
