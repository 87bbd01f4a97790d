"""
Build and apply the dictConfig logging configuration.

    setup_logging(settings)

is called once by the app factory; modules then simply use
`logging.getLogger(__name__)`.
"""

import logging
import logging.config
from pathlib import Path

from psu_catalog.config.settings import Settings

from .filters import RedactFilter, RequestIdFilter
from .formatters import ColorFormatter, JsonFormatter
from .handlers import (
    get_console_handler,
    get_error_console_handler,
    get_error_file_handler,
    get_file_handler,
)

TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s"


def file_logging_enabled(settings: Settings) -> bool:
    return (not settings.LOG_TO_STDOUT) and bool(settings.LOG_DIR)


def make_dict_config(settings: Settings) -> dict:
    """
    Handlers:
      - console: always
      - file + error_file: when LOG_TO_STDOUT is false and LOG_DIR is set
      - error_console: otherwise
    """
    formatters = {
        "standard": {
            "()": ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter,
            "format": TEXT_FORMAT,
        },
        "json": {
            "()": JsonFormatter,
            "env": settings.ENV,
            "service": settings.SERVICE_NAME,
        },
    }

    filters = {
        "request_id": {"()": RequestIdFilter},
        "redact": {"()": RedactFilter},
    }

    handlers: dict[str, dict] = {"console": get_console_handler(settings)}
    if file_logging_enabled(settings):
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
    else:
        handlers["error_console"] = get_error_console_handler(settings)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": list(handlers.keys()),
                "level": settings.LOG_LEVEL,
            },
            "uvicorn.error": {
                "level": settings.LOG_LEVEL,
                "handlers": list(handlers.keys()),
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["console"],
                "propagate": False,
            },
            # SQL statements may contain user data: echoed only when enabled
            "sqlalchemy.engine": {
                "level": "INFO" if settings.ENABLE_SQL_LOGGING else "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def setup_logging(settings: Settings) -> None:
    if file_logging_enabled(settings):
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))

    # records logged straight on the root logger still get %(request_id)s
    logging.getLogger().addFilter(RequestIdFilter())
