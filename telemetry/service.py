"""
Structured logging for the session store.

This module provides a JSON log formatter and a helper that installs it on
the root logger according to the configured log level. Modules log through
``logging.getLogger(__name__)`` and attach structured context under the
``extra_data`` attribute:

    logger.debug("Cleared session store", extra={"extra_data": {"deleted": 3}})
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional, Dict

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class JSONFormatter(logging.Formatter):
    """
    Log formatter that outputs one JSON object per record.

    Each log entry contains:
    - timestamp: ISO 8601 formatted UTC timestamp
    - level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - message: The log message
    - logger: Name of the logger that produced the entry

    Fields in the record's ``extra_data`` mapping are merged into the entry.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.module:
            log_data["module"] = record.module
        if record.funcName and record.funcName != "<module>":
            log_data["function"] = record.funcName
        if record.lineno:
            log_data["line"] = record.lineno

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            log_data.update(extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_data["stack_trace"] = record.stack_info

        return json.dumps(log_data, default=str)


def configure_logging(settings: Optional[Any] = None) -> logging.Logger:
    """
    Install a stdout handler on the root logger.

    Existing root handlers are replaced to avoid duplicate output.

    Args:
        settings: Object with ``log_level`` and ``log_json`` attributes,
            typically ``config.Settings``. Defaults to INFO and JSON output.

    Returns:
        The root logger.
    """
    log_level_str = getattr(settings, "log_level", "INFO")
    use_json = getattr(settings, "log_json", True)
    log_level = getattr(logging, str(log_level_str).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(log_level)
    stdout_handler.setFormatter(JSONFormatter() if use_json else logging.Formatter(TEXT_FORMAT))
    root_logger.addHandler(stdout_handler)

    logging.getLogger("telemetry").debug("Logging configured", extra={
        "extra_data": {"log_level": log_level_str, "json": use_json}
    })
    return root_logger
