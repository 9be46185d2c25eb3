from __future__ import annotations

import json
import logging
import os
import re
from datetime import datetime, timezone

from menu_builder.core.request_context import current_context

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

_CONTEXT_FIELDS = ("request_id", "user_id", "company_id")
_REQUEST_FIELDS = ("endpoint", "method", "status_code", "duration_ms")

_SECRET_PATTERN = re.compile(
    r"(authorization\s*[:=]\s*bearer\s+|(?:token|password|secret)\s*[:=]\s*)([^\s\",}]+)",
    re.IGNORECASE,
)


def mask_secrets(text: str) -> str:
    return _SECRET_PATTERN.sub(r"\1***", text)


class RequestContextFilter(logging.Filter):
    """Copy the current request identity onto the record.

    Values passed through ``extra=`` win over the context, so the access log
    line written by the middleware keeps the ids it resolved itself.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        context = current_context()
        for field in _CONTEXT_FIELDS:
            if getattr(record, field, None) is None:
                setattr(record, field, getattr(context, field))
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        context = current_context()
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "message": mask_secrets(record.message),
        }
        for field in _CONTEXT_FIELDS:
            payload[field] = getattr(record, field, None) or getattr(context, field)
        for field in _REQUEST_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exception"] = mask_secrets(self.formatException(record.exc_info))
        return json.dumps(payload, ensure_ascii=False, default=str)


def build_handler(stream=None) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(JsonFormatter())
    return handler


def configure_logging() -> None:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(LOG_LEVEL)
    root_logger.addHandler(build_handler())

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(logger_name).setLevel(LOG_LEVEL)
