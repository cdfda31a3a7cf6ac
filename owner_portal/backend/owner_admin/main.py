# backend/owner_admin/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .domain.errors import AdminError
from .logging_config import configure_logging
from .middleware.request_id import RequestIDMiddleware
from .middleware.structured_logging import StructuredLoggingMiddleware

from .routers.health import router as health_router
from .routers.setup import router as setup_router
from .routers.admin import router as admin_router

API_PREFIX = "/api"

log = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    val = getattr(settings, "cors_allow_origins", ["*"])
    if isinstance(val, str):
        v = val.strip()
        return ["*"] if v == "*" else [x.strip() for x in v.split(",") if x.strip()]
    if isinstance(val, list) and val:
        return val
    return ["*"]


async def _admin_error_handler(request: Request, exc: AdminError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("request failed: %s", exc.message)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Owner Portal Admin", version=settings.app_version)

    # added last = outermost, so the request id is set before the access log line
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AdminError, _admin_error_handler)

    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(setup_router, prefix=API_PREFIX)
    app.include_router(admin_router, prefix=API_PREFIX)
    return app


app = create_app()
