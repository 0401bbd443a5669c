# moviemeter/main.py
from __future__ import annotations

"""
# MovieMeter API: Application Entrypoint (FastAPI)

ASGI application factory and lifecycle for the MovieMeter review backend.

## Design Goals
- Deterministic, testable **app factory** (`create_app`) with explicit lifespan.
- Explicit **middleware order** (outermost first):
  1) request id → 2) security headers (+ optional HTTPS redirect) →
  3) CORS → 4) gzip → 5) body-size limit.
- Centralized problem+json exception handling.
- Tables are created on startup when `DB_CREATE_ALL` is set (no migrations).

## Probes
- `/healthz`: liveness (process up).
- `/readyz`: readiness (quick DB check).
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator
import logging
import os

from fastapi import FastAPI
from starlette.middleware.gzip import GZipMiddleware
from starlette.responses import JSONResponse

# -- Logging bootstrap (Loguru + stdlib intercept) ----------------------------
from moviemeter.core import logger as _logsetup  # noqa: F401

from moviemeter.api.v1.routers import build_v1_router
from moviemeter.core.config import settings
from moviemeter.core.exception_handlers import install_exception_handlers
from moviemeter.db.session import create_all, db_healthcheck, dispose_engine
from moviemeter.middleware.body_limit import BodySizeLimitMiddleware
from moviemeter.middleware.request_id import RequestIDMiddleware
from moviemeter.security_headers import configure_cors, install_security

logger = logging.getLogger("moviemeter")


# ─────────────────────────────────────────────────────────────────────────────
# 🔄 Lifespan: startup & shutdown
# ─────────────────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Startup:
        - Create missing tables (best-effort; `/readyz` reports DB trouble).

    Shutdown:
        - Dispose the DB async engine.
    """
    logger.info(f"✅ {settings.PROJECT_NAME} starting up (env={settings.ENV})")

    if settings.DB_CREATE_ALL:
        try:
            await create_all()
            logger.info("🗄️ Database tables ensured")
        except Exception:
            logger.exception("Table creation failed (continuing; readiness will report the DB)")

    try:
        yield
    finally:
        await dispose_engine()
        logger.info(f"🛑 {settings.PROJECT_NAME} shutting down")


# ─────────────────────────────────────────────────────────────────────────────
# 🏗️ App factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app() -> FastAPI:
    """
    Build and configure the FastAPI app instance.

    Returns:
        FastAPI: fully wired application with middleware, exception handlers,
        routers, and health/readiness endpoints.
    """
    docs_url = "/docs" if settings.ENABLE_DOCS else None
    redoc_url = "/redoc" if settings.ENABLE_DOCS else None
    openapi_url = "/openapi.json" if settings.ENABLE_DOCS else None

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        docs_url=docs_url,
        redoc_url=redoc_url,
        openapi_url=openapi_url,
        lifespan=lifespan,
    )

    # ── Middlewares (last added runs outermost) ─────────────────────────────
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.MAX_BODY_BYTES)  # 5)
    app.add_middleware(GZipMiddleware, minimum_size=1024)  # 4)
    configure_cors(app)  # 3)
    install_security(app)  # 2)
    app.add_middleware(RequestIDMiddleware)  # 1)

    install_exception_handlers(app)

    # ── Routers ─────────────────────────────────────────────────────────────
    app.include_router(build_v1_router(), prefix=settings.API_PREFIX)

    # ── Meta endpoints ──────────────────────────────────────────────────────
    @app.get("/healthz", tags=["meta"])
    async def healthz() -> dict[str, bool]:
        """Liveness probe: `{"ok": true}` while the process is responsive."""
        return {"ok": True}

    @app.get("/readyz", tags=["meta"])
    async def readyz() -> JSONResponse:
        """Readiness probe; 503 while the database is unreachable."""
        db_ok = await db_healthcheck()
        return JSONResponse(
            {"ready": db_ok, "checks": {"db": db_ok}},
            status_code=200 if db_ok else 503,
        )

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        prefix = settings.API_PREFIX
        body = {
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": app.docs_url or "",
            "endpoints": {
                "auth": f"{prefix}/auth",
                "reviews": f"{prefix}/reviews",
                "health": "/healthz",
            },
        }
        return JSONResponse(body)

    return app


# ─────────────────────────────────────────────────────────────────────────────
# 🚀 Module-level ASGI app for Uvicorn
# ─────────────────────────────────────────────────────────────────────────────
app = create_app()
__all__ = ["create_app", "app"]


# Local dev runner (prefer: `uvicorn moviemeter.main:app --reload`)
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "moviemeter.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "1") == "1",
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
