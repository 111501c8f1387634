from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from sdxl_gateway.core.errors.exceptions import AppError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(_request: Request, exc: AppError):
        return PlainTextResponse(
            exc.message,
            status_code=exc.http_status,
            headers={"X-Error-Code": exc.code},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(_request: Request, exc: Exception):
        # Avoid leaking internal details to the caller.
        logger.error("Unhandled error: %r", exc, exc_info=exc)
        return PlainTextResponse(
            "Internal server error",
            status_code=500,
            headers={"X-Error-Code": "INTERNAL"},
        )
