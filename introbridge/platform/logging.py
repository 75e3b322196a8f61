import json
import logging
import sys
from datetime import datetime, timezone

from ..platform.config import settings
from ..platform.request_context import get_request_id

# Correlation fields engine code attaches through ``extra=``
_CONTEXT_FIELDS = ("organization_id", "candidate_id", "introduction_id", "job_role_id", "error_code")

_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "celery.app.trace")


class JsonFormatter(logging.Formatter):
    """One JSON object per line, tagged with the current request id."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None) or get_request_id()
        if request_id:
            payload["request_id"] = request_id
        payload.update(
            {name: getattr(record, name) for name in _CONTEXT_FIELDS if getattr(record, name, None) is not None}
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def setup_logging(level: str | int | None = None) -> logging.Logger:
    """Route every logger through a single stdout handler emitting JSON lines."""
    resolved = level if level is not None else settings.LOG_LEVEL
    if isinstance(resolved, str):
        resolved = logging.getLevelName(resolved.strip().upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(resolved)
    root_logger.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return root_logger
