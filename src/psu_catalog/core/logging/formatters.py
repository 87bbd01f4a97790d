"""
Log formatters.

- JsonFormatter: one JSON object per line for log collectors; carries
  service / env / version / request_id plus every `extra` field.
- ColorFormatter: compact ANSI-colored lines for a developer terminal.
"""

import json
import logging
from importlib import metadata as importlib_metadata
from logging import LogRecord
from typing import Any

DISTRIBUTION_NAME = "psu-catalog"

# Attributes every LogRecord has; anything else on the record came from `extra`
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime", "request_id", "taskName"}


def get_project_version(distribution: str = DISTRIBUTION_NAME) -> str:
    try:
        return importlib_metadata.version(distribution)
    except importlib_metadata.PackageNotFoundError:
        return "unknown"


PROJECT_VERSION = get_project_version()


class JsonFormatter(logging.Formatter):
    """
    Structured JSON formatter.

    Construction kwargs (passed through dictConfig):
      - env: environment name ("development", "production", ...)
      - service: logical service name
      - datefmt: optional date format for `formatTime`

    Never raises on odd extras: values that are not JSON-serializable are
    emitted as `str(value)`.
    """

    def __init__(self, *, env: str | None = None, service: str = DISTRIBUTION_NAME, datefmt: str | None = None):
        super().__init__(datefmt=datefmt)
        self.env = env
        self.service = service

    def format(self, record: LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "lineno": record.lineno,
            "request_id": getattr(record, "request_id", "-"),
            "service": self.service,
            "env": self.env,
            "version": PROJECT_VERSION,
        }

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            log_record["stack_info"] = self.formatStack(record.stack_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in log_record or key.startswith("_"):
                continue
            try:
                json.dumps(value)
                log_record[key] = value
            except (TypeError, ValueError):
                log_record[key] = str(value)

        return json.dumps(log_record, ensure_ascii=False, default=str)


class ColorFormatter(logging.Formatter):
    """
    Development formatter: TIMESTAMP | LEVEL | LOGGER | REQUEST_ID | MESSAGE,
    with the level colored and the traceback appended on new lines.
    """

    COLOR_CODES = {
        "DEBUG": "\033[36m",        # cyan
        "INFO": "\033[32m",         # green
        "WARNING": "\033[33m",      # yellow
        "ERROR": "\033[31m",        # red
        "CRITICAL": "\033[1;41m",   # bold, red background
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str | None = None, datefmt: str | None = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)

    def format(self, record: LogRecord) -> str:
        color = self.COLOR_CODES.get(record.levelname, "")
        level = f"{color}{record.levelname:<8}{self.RESET}" if color else f"{record.levelname:<8}"
        line = " | ".join(
            [
                self.formatTime(record, self.datefmt),
                level,
                record.name,
                str(getattr(record, "request_id", "-")),
                record.getMessage(),
            ]
        )
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        if record.stack_info:
            line = f"{line}\n{self.formatStack(record.stack_info)}"
        return line
