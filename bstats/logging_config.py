"""
Structured logging configuration for the bStats command line
"""
import logging
import json
import sys
import os
from datetime import datetime, timezone


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging"""

    def __init__(self, service_name: str = "bstats", include_trace: bool = False):
        super().__init__()
        self.service_name = service_name
        self.include_trace = include_trace

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON"""
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
        }

        if self.include_trace:
            log_entry.update({
                "thread_name": record.threadName,
                "filename": record.filename,
                "function": record.funcName,
                "line_number": record.lineno,
            })

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_entry, default=str)


def setup_logging(
    service_name: str = "bstats",
    level: str = "INFO",
    structured: bool = False,
    include_trace: bool = False
) -> None:
    """Configure logging for standalone use"""

    log_level = os.getenv("LOG_LEVEL", level).upper()

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)

    if structured:
        formatter = StructuredFormatter(service_name=service_name, include_trace=include_trace)
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    handler.setFormatter(formatter)

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level))

    logging.getLogger("aiohttp").setLevel(logging.WARNING)
