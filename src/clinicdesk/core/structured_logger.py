"""
Structured logging utilities for application-wide logging
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

ROOT_LOGGER_NAME = "clinicdesk"


class StructuredLogger:
    """
    Logger wrapper that attaches key/value context to each record
    """

    def __init__(self, name: str, **context: Any):
        self.logger = logging.getLogger(name)
        self.context: Dict[str, Any] = dict(context)

    def log(self, level: int, message: str, exc_info: bool = False, **kwargs: Any):
        """Log with structured data"""
        extra_data = {**self.context, **kwargs}
        self.logger.log(level, message, exc_info=exc_info, extra={"extra_data": extra_data})

    def info(self, message: str, **kwargs: Any):
        """Log info level"""
        self.log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any):
        """Log warning level"""
        self.log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs: Any):
        """Log error level"""
        self.log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def debug(self, message: str, **kwargs: Any):
        """Log debug level"""
        self.log(logging.DEBUG, message, **kwargs)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process": record.process,
            "thread": record.thread,
        }

        # Add exception info if present
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        # Add extra fields if present
        if hasattr(record, "extra_data"):
            log_obj.update(record.extra_data)

        return json.dumps(log_obj, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable formatter that appends structured fields"""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s [%(name)s] %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            pairs = " ".join(f"{k}={v}" for k, v in extra_data.items())
            line = f"{line} | {pairs}"
        return line


def configure_logging(level: str = "INFO", log_format: str = "json", stream: Optional[Any] = None) -> logging.Logger:
    """Configure the application logger hierarchy once"""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler(stream or sys.stdout)
        logger.addHandler(handler)
    for handler in logger.handlers:
        handler.setFormatter(JSONFormatter() if log_format == "json" else TextFormatter())

    return logger


def get_logger(name: str, **context: Any) -> StructuredLogger:
    """Get or create a structured logger"""
    return StructuredLogger(name, **context)
