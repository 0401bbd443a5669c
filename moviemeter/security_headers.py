# moviemeter/security_headers.py
from __future__ import annotations

"""
# MovieMeter: Security Headers & CORS

## What you get
- **Headers**: X-Content-Type-Options, X-Frame-Options, X-XSS-Protection,
  Referrer-Policy, CORP/COOP, a locked-down CSP for a JSON API, and HSTS
  when `HSTS_MAX_AGE > 0`.
- **CORS installer**: strict allow-list from settings (`FRONTEND_ORIGINS`, or
  `CLIENT_ORIGIN` + `LOCAL_ORIGIN`), `Authorization` allowed for Bearer tokens.
- **Cache helper**: `set_sensitive_cache()` for token-bearing / per-user bodies.

## Quick start
    from moviemeter.security_headers import install_security, configure_cors

    app = FastAPI()
    install_security(app)
    configure_cors(app)

## Env knobs
- ENABLE_HTTPS_REDIRECT (default "false")
- SECURITY_SKIP_PATHS (CSV; default "/docs,/redoc,/openapi.json")
- HSTS_MAX_AGE (0 disables), REFERRER_POLICY, PERMISSIONS_POLICY
- CROSS_ORIGIN_OPENER_POLICY / CROSS_ORIGIN_RESOURCE_POLICY
"""

import os
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union

from fastapi import Request, Response
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from moviemeter.core.config import settings


# ─────────────────────────────────────────────────────────────
# ⚙️ Configuration
# ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class SecurityHeadersConfig:
    """Runtime configuration for security headers (env-driven)."""

    hsts_max_age: int = int(os.getenv("HSTS_MAX_AGE", "0"))
    content_security_policy: str = os.getenv(
        "CONTENT_SECURITY_POLICY", "default-src 'none'; frame-ancestors 'none'"
    )
    referrer_policy: str = os.getenv("REFERRER_POLICY", "strict-origin-when-cross-origin")
    permissions_policy: str = os.getenv(
        "PERMISSIONS_POLICY", "camera=(), microphone=(), geolocation=(), payment=()"
    )
    coop: str = os.getenv("CROSS_ORIGIN_OPENER_POLICY", "same-origin")
    corp: str = os.getenv("CROSS_ORIGIN_RESOURCE_POLICY", "same-origin")
    skip_paths_csv: str = os.getenv("SECURITY_SKIP_PATHS", "/docs,/redoc,/openapi.json")


_CFG = SecurityHeadersConfig()

RawHeaders = List[Tuple[bytes, bytes]]


def _has_header(raw_headers: RawHeaders, name: str) -> bool:
    lname = name.lower().encode("latin-1")
    return any(h[0].lower() == lname for h in raw_headers)


def _ensure(raw_headers: RawHeaders, name: str, value: str) -> None:
    if not _has_header(raw_headers, name):
        raw_headers.append((name.encode("latin-1"), value.encode("latin-1")))


def _apply_headers_to_raw(raw_headers: RawHeaders, cfg: SecurityHeadersConfig) -> None:
    """Append security headers idempotently to the ASGI raw header list."""
    _ensure(raw_headers, "X-Content-Type-Options", "nosniff")
    _ensure(raw_headers, "X-Frame-Options", "DENY")
    _ensure(raw_headers, "X-XSS-Protection", "1; mode=block")
    _ensure(raw_headers, "Referrer-Policy", cfg.referrer_policy)
    _ensure(raw_headers, "Permissions-Policy", cfg.permissions_policy)
    _ensure(raw_headers, "Cross-Origin-Opener-Policy", cfg.coop)
    _ensure(raw_headers, "Cross-Origin-Resource-Policy", cfg.corp)
    _ensure(raw_headers, "Content-Security-Policy", cfg.content_security_policy)
    if cfg.hsts_max_age > 0:
        _ensure(raw_headers, "Strict-Transport-Security", f"max-age={cfg.hsts_max_age}; includeSubDomains")


def _apply_sensitive_cache_to_raw(raw_headers: RawHeaders) -> None:
    _ensure(raw_headers, "Cache-Control", "no-store")
    _ensure(raw_headers, "Pragma", "no-cache")
    _ensure(raw_headers, "Expires", "0")


# ─────────────────────────────────────────────────────────────
# 🧩 Middleware
# ─────────────────────────────────────────────────────────────
class SecurityHeadersMiddleware:
    """
    ASGI middleware that:
    - Applies security headers idempotently on every response.
    - Applies **sensitive cache** headers if marked on the `Request`.
    - Skips configured path prefixes (docs).
    - Drops the `Server` header.
    """

    def __init__(self, app: ASGIApp, cfg: SecurityHeadersConfig = _CFG) -> None:
        self.app = app
        self.cfg = cfg
        self._skip_prefixes: Tuple[str, ...] = tuple(
            p.strip() for p in (cfg.skip_paths_csv or "").split(",") if p.strip()
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        is_skipped = any(scope.get("path", "").startswith(p) for p in self._skip_prefixes)
        state = scope.setdefault("state", {})

        async def send_wrapper(message: Message) -> None:
            if message.get("type") == "http.response.start":
                raw_headers: RawHeaders = [
                    (k, v) for (k, v) in message.get("headers", []) if k.lower() != b"server"
                ]
                if not is_skipped:
                    _apply_headers_to_raw(raw_headers, self.cfg)
                if state.get("_sensitive_cache"):
                    _apply_sensitive_cache_to_raw(raw_headers)
                message["headers"] = raw_headers
            await send(message)

        await self.app(scope, receive, send_wrapper)


# ─────────────────────────────────────────────────────────────
# 🔓 Public helpers
# ─────────────────────────────────────────────────────────────
def set_sensitive_cache(target: Union[Response, Request]) -> None:
    """
    Mark a **Response** or **Request** as not cacheable.

    - If `Response`: headers are set immediately (idempotent).
    - If `Request`: sets a flag read by the middleware at response start.
    """
    if isinstance(target, Response):
        target.headers.setdefault("Cache-Control", "no-store")
        target.headers.setdefault("Pragma", "no-cache")
        target.headers.setdefault("Expires", "0")
        return

    state = getattr(target, "state", None)
    if state is not None:
        setattr(state, "_sensitive_cache", True)


def configure_cors(
    app,
    *,
    allow_methods: Optional[Iterable[str]] = None,
    allow_headers: Optional[Iterable[str]] = None,
) -> None:
    """Install strict CORS from the settings allow-list."""
    allow_methods = allow_methods or ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
    allow_headers = allow_headers or ["Authorization", "Content-Type", "X-Request-ID"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.frontend_origins_list,
        allow_credentials=False,
        allow_methods=list(allow_methods),
        allow_headers=list(allow_headers),
        expose_headers=["Location", "X-Request-ID"],
        max_age=600,
    )


def install_security(app) -> None:
    """Add HTTPS redirect (optional) and the security headers middleware."""
    if os.getenv("ENABLE_HTTPS_REDIRECT", "false").lower() == "true":
        app.add_middleware(HTTPSRedirectMiddleware)

    app.add_middleware(SecurityHeadersMiddleware, cfg=_CFG)


__all__ = [
    "SecurityHeadersConfig",
    "SecurityHeadersMiddleware",
    "install_security",
    "configure_cors",
    "set_sensitive_cache",
]
