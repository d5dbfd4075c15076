"""Centralized error handling for requests that never reach the dispatcher."""
import logging

from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

from .utils.errors import ErrorCode, make_error

log = logging.getLogger(__name__)


def _render_http_error(request: Request, exc: HTTPException, message: str) -> JSONResponse:
    log.warning(
        "http.rejected",
        extra={
            "path": request.url.path,
            "http_method": request.method,
            "status_code": exc.status_code,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "jsonrpc": "2.0",
            "id": None,
            "error": make_error(ErrorCode.INVALID_REQUEST, message),
        },
        headers=getattr(exc, "headers", None),
    )


def install_error_handlers(app) -> None:
    """Install JSON-RPC shaped 404 and 405 handlers on the Starlette app."""

    async def _on_not_found(request: Request, exc: HTTPException) -> JSONResponse:
        return _render_http_error(request, exc, f"Not found: {request.url.path}")

    async def _on_method_not_allowed(request: Request, exc: HTTPException) -> JSONResponse:
        return _render_http_error(
            request, exc, f"Method not allowed: {request.method} {request.url.path}"
        )

    app.add_exception_handler(404, _on_not_found)
    app.add_exception_handler(405, _on_method_not_allowed)
