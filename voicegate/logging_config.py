"""JSON logging configuration for voicegate."""

import json
import logging
import os
import sys
from datetime import datetime, timezone

EXTRA_FIELDS = ("request_id", "application_id", "remote_addr")


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record):
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for k in EXTRA_FIELDS:
            if hasattr(record, k):
                payload[k] = getattr(record, k)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(log_file: str = None, log_level: str = None):
    """Configure root logging with the JSON formatter.

    Args:
        log_file: Optional log file path. Defaults to VOICEGATE_LOG_FILE;
            no file handler when neither is set.
        log_level: Log level. Defaults to VOICEGATE_LOG_LEVEL or 'INFO'.
    """
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(JsonFormatter())
    handlers = [console_handler]

    log_file = log_file or os.getenv("VOICEGATE_LOG_FILE")
    if log_file:
        file_handler = logging.FileHandler(log_file, mode='a')
        file_handler.setFormatter(JsonFormatter())
        handlers.append(file_handler)

    root = logging.getLogger()
    log_level = (log_level or os.getenv("VOICEGATE_LOG_LEVEL", "INFO")).upper()
    root.setLevel(getattr(logging, log_level, logging.INFO))
    root.handlers = handlers
