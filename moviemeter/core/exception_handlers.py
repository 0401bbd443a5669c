from __future__ import annotations

"""
Problem+JSON exception handlers (RFC 7807).

Installed by `moviemeter.main.create_app` via `install_exception_handlers`.
All errors are rendered as application/problem+json with a stable schema:
`type, title, detail, status, instance, code, request_id`.

Request-body validation failures are client input errors and map to **400**.
Unhandled exceptions are logged with their traceback and rendered as a
generic 500; the exception text is only echoed outside production.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from moviemeter.core.config import settings
from moviemeter.core.exceptions import AppException
from moviemeter.middleware.request_id import get_request_id

logger = logging.getLogger(__name__)

PROBLEM_JSON = "application/problem+json"

_DEFAULT_CODES = {
    400: "bad_request",
    401: "unauthenticated",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    413: "payload_too_large",
}


def _problem(
    request: Request,
    *,
    title: str,
    detail: str,
    status_code: int,
    code: str,
    extra: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body: Dict[str, Any] = {
        "type": "about:blank",
        "title": title,
        "detail": detail,
        "status": status_code,
        "instance": str(request.url.path),
        "code": code,
        "request_id": get_request_id(request) or "N/A",
    }
    if extra:
        body.update(extra)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body),
        media_type=PROBLEM_JSON,
        headers=headers,
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.title, request.method, request.url.path, exc.message)
    body = exc.to_problem(instance=str(request.url.path), request_id=get_request_id(request) or None)
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(body),
        media_type=PROBLEM_JSON,
        headers=getattr(exc, "headers", None),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    title = exc.__class__.__name__.replace("Exception", "").strip() or "Error"
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _problem(
        request,
        title=title,
        detail=detail,
        status_code=exc.status_code,
        code=_DEFAULT_CODES.get(exc.status_code, "error"),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    detail = f"Invalid value for '{field}'" if field else "Validation failed"
    return _problem(
        request,
        title="ValidationFailed",
        detail=detail,
        status_code=status.HTTP_400_BAD_REQUEST,
        code="validation_error",
        extra={"errors": [{k: e.get(k) for k in ("loc", "msg", "type")} for e in errors]},
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    detail = "Something went wrong" if settings.is_production else (str(exc) or "Something went wrong")
    return _problem(
        request,
        title="Internal Server Error",
        detail=detail,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="internal_error",
    )


def install_exception_handlers(app: FastAPI) -> None:
    """Register every handler on `app` (most specific first)."""
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)


__all__ = [
    "app_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
    "global_exception_handler",
    "install_exception_handlers",
]
