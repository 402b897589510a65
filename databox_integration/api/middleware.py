from __future__ import annotations

import time
import uuid

import structlog
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from ..schemas.records import ErrorResponse

log = structlog.get_logger()


class RequestIDMiddleware:
    """Tags every HTTP request with an id.

    The id is stored on ``request.state``, bound into structlog's context for
    the duration of the request and echoed back as ``x-request-id``.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return
        request_id = uuid.uuid4().hex
        scope.setdefault("state", {})
        scope["state"]["request_id"] = request_id

        start = time.perf_counter()

        async def send_wrapper(message):
            if message.get("type") == "http.response.start":
                headers = message.setdefault("headers", [])
                headers.append((b"x-request-id", request_id.encode()))
            await send(message)

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            try:
                await self.app(scope, receive, send_wrapper)
            finally:
                dur_ms = int((time.perf_counter() - start) * 1000)
                log.info(
                    "request_completed",
                    method=scope.get("method", ""),
                    path=scope.get("path", ""),
                    duration_ms=dur_ms,
                )


def _request_id(request: Request) -> str:
    return getattr(getattr(request, "state", None), "request_id", None) or ""


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    body = ErrorResponse(error=str(exc.detail), request_id=_request_id(request)).model_dump()
    # x-request-id header is added by RequestIDMiddleware
    return JSONResponse(status_code=exc.status_code, content=body)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error("unhandled_exception", error=str(exc), exc_type=type(exc).__name__)
    body = ErrorResponse(error=str(exc), request_id=_request_id(request)).model_dump()
    return JSONResponse(status_code=500, content=body)
