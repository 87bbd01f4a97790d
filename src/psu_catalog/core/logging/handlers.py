"""
Handler factories for logging.dictConfig.

Each function returns a handler configuration dict; `builder.make_dict_config`
decides which of them are wired in.
"""

from pathlib import Path

from psu_catalog.config.settings import Settings

_FILTERS = ["request_id", "redact"]


def _formatter_name(settings: Settings) -> str:
    # both names are declared in builder.make_dict_config
    return "json" if settings.LOG_FORMAT == "json" else "standard"


def get_console_handler(settings: Settings) -> dict:
    return {
        "class": "logging.StreamHandler",
        "formatter": _formatter_name(settings),
        "level": settings.LOG_LEVEL,
        "filters": _FILTERS,
        "stream": "ext://sys.stdout",
    }


def get_file_handler(settings: Settings) -> dict:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": _formatter_name(settings),
        "level": settings.LOG_LEVEL,
        "filename": str(Path(settings.LOG_DIR) / "app.log"),
        "maxBytes": settings.LOG_MAX_BYTES,
        "backupCount": settings.LOG_BACKUP_COUNT,
        "encoding": "utf-8",
        "filters": _FILTERS,
    }


def get_error_file_handler(settings: Settings) -> dict:
    """ERROR and above, always JSON, in its own rotating file."""
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": "json",
        "level": "ERROR",
        "filename": str(Path(settings.LOG_DIR) / "errors.log"),
        "maxBytes": settings.LOG_MAX_BYTES,
        "backupCount": settings.LOG_BACKUP_COUNT,
        "encoding": "utf-8",
        "filters": _FILTERS,
    }


def get_error_console_handler(settings: Settings) -> dict:
    return {
        "class": "logging.StreamHandler",
        "formatter": "json",
        "level": "ERROR",
        "filters": _FILTERS,
        "stream": "ext://sys.stderr",
    }
