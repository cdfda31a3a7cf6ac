# backend/owner_admin/logging_config.py
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Iterable

from .middleware.request_id import get_request_id


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line: ts, level, logger, message, request_id, exc_info,
    plus whichever entity ids the caller passed via `extra=`.
    """

    entity_fields = ("owner_id", "accountant_id", "property_id", "email", "role")

    def __init__(self, entity_fields: Iterable[str] | None = None) -> None:
        super().__init__()
        if entity_fields is not None:
            self.entity_fields = tuple(entity_fields)

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": get_request_id(),
        }
        payload.update({k: getattr(record, k) for k in self.entity_fields if hasattr(record, k)})

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        # ids and datetimes from the models are not JSON-native
        return json.dumps({k: v for k, v in payload.items() if v is not None}, ensure_ascii=False, default=str)


def _level(env_var: str, default: str) -> str:
    return (os.getenv(env_var) or default).strip().upper()


def configure_logging() -> None:
    level = _level("LOG_LEVEL", "INFO")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    logging.getLogger("uvicorn.access").setLevel(level)
    logging.getLogger("sqlalchemy.engine").setLevel(_level("SQL_LOG_LEVEL", "WARNING"))
    # httpx logs every relay / Hostkit request at INFO
    logging.getLogger("httpx").setLevel(_level("HTTPX_LOG_LEVEL", "WARNING"))
