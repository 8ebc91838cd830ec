"""
Package logger for member search.

Everything logs through the `member_search` logger created here:
console lines for people, plus JSON lines for errors when LOG_FILE_PATH
is configured so they can be collected by a log shipper.

Example:
    ```python
    from member_search.logging import logger

    logger.debug(f"Count query executed, total={total}")
    logger.error("Store unavailable", extra={"operation": "counting"})
    ```
"""

import json
import logging
import sys
from typing import Any

from member_search.settings import app_settings

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord carries; anything else came in via extra={...}
_STANDARD_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


class StructuredJSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    Carries level, logger, message, source location and environment, the
    formatted traceback when there is one, and every `extra` field.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "environment": app_settings.ENVIRONMENT,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        payload.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _STANDARD_RECORD_ATTRS
        )
        return json.dumps(payload, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Console formatter.

    INFO lines are short; every other level also shows where the record
    was emitted from.
    """

    SHORT_FMT = "%(asctime)s - %(levelname)s: %(message)s"
    LOCATED_FMT = (
        "%(asctime)s - %(levelname)s: "
        "%(module)s.%(funcName)s:%(lineno)d - %(message)s"
    )

    def __init__(self) -> None:
        super().__init__(datefmt=DATE_FORMAT)
        self._short = logging.Formatter(self.SHORT_FMT, datefmt=DATE_FORMAT)
        self._located = logging.Formatter(self.LOCATED_FMT, datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno == logging.INFO:
            return self._short.format(record)
        return self._located.format(record)


def setup_logging() -> logging.Logger:
    """
    Configure and return the `member_search` logger.

    Handlers are replaced rather than appended, so calling this again
    (e.g. after changing settings in tests) does not duplicate output.
    Output is silenced below CRITICAL when running under pytest.

    Returns:
        The configured logger.
    """
    logger = logging.getLogger("member_search")
    logger.setLevel(app_settings.LOG_LEVEL.upper())
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(HumanReadableFormatter())
    logger.addHandler(console_handler)

    if app_settings.LOG_FILE_PATH:
        try:
            error_file_handler = logging.FileHandler(app_settings.LOG_FILE_PATH)
        except OSError as e:
            logger.warning(f"Could not open log file {app_settings.LOG_FILE_PATH}: {e}")
        else:
            error_file_handler.setLevel(logging.ERROR)
            error_file_handler.setFormatter(StructuredJSONFormatter())
            logger.addHandler(error_file_handler)

    if sys.argv[0].split("/")[-1] == "pytest":
        logging.disable(logging.ERROR)

    return logger


logger = setup_logging()
