# backend/owner_admin/middleware/request_id.py
from __future__ import annotations

import uuid
from contextvars import ContextVar
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

INCOMING_HEADERS = ("X-Request-ID", "X-Request-Id", "X-Correlation-ID")


def get_request_id() -> str | None:
    return request_id_ctx.get()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tags every admin request with an id so log lines from the relationship
    cascades and best-effort steps of one call can be grouped.

    The id is taken from the first incoming header found in INCOMING_HEADERS,
    or generated, and echoed back as X-Request-ID.
    """

    header_out = "X-Request-ID"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = next((request.headers[h] for h in INCOMING_HEADERS if request.headers.get(h)), None)
        if not rid:
            rid = uuid.uuid4().hex

        request.state.request_id = rid
        token = request_id_ctx.set(rid)
        try:
            resp = await call_next(request)
            resp.headers[self.header_out] = rid
            return resp
        finally:
            request_id_ctx.reset(token)
