from __future__ import annotations

"""
Body-size guard (pure ASGI).

- A declared `Content-Length` above `max_bytes` is answered with 413 before
  the route (and JSON parsing) runs.
- Bodies without a declared length (chunked uploads) are counted as they are
  received; crossing `max_bytes` raises `PayloadTooLarge`, which the app's
  exception handlers render as 413 problem+json.
"""

from fastapi.encoders import jsonable_encoder
from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from moviemeter.core.exceptions import PayloadTooLarge


class BodySizeLimitMiddleware:
    """413 for bodies larger than `max_bytes` (declared or streamed)."""

    def __init__(self, app: ASGIApp, *, max_bytes: int) -> None:
        self.app = app
        self.max_bytes = int(max_bytes)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        declared = Headers(scope=scope).get("content-length")
        if declared and declared.isdigit() and int(declared) > self.max_bytes:
            return await self._reject(scope, receive, send)

        received = 0

        async def _limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message.get("type") == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    raise PayloadTooLarge()
            return message

        await self.app(scope, _limited_receive, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send) -> None:
        request_id = scope.get("state", {}).get("request_id")
        body = PayloadTooLarge().to_problem(instance=scope.get("path", ""), request_id=request_id)
        response = JSONResponse(
            jsonable_encoder(body),
            status_code=PayloadTooLarge.default_status,
            media_type="application/problem+json",
        )
        await response(scope, receive, send)


__all__ = ["BodySizeLimitMiddleware"]
