import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from moviemeter.core.config import settings
from moviemeter.db.session import dispose_engine
from moviemeter.main import create_app


# ─────────────────────────────────────────────────────────────
# Meta endpoints
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_healthz(async_client: AsyncClient):
    resp = await async_client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


@pytest.mark.anyio
async def test_root_lists_endpoints(async_client: AsyncClient):
    resp = await async_client.get("/")
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == settings.PROJECT_NAME
    assert body["endpoints"]["reviews"] == "/api/reviews"


@pytest.mark.anyio
async def test_readyz_checks_database(async_client: AsyncClient):
    try:
        resp = await async_client.get("/readyz")
        assert resp.status_code == 200
        assert resp.json() == {"ready": True, "checks": {"db": True}}
    finally:
        await dispose_engine()


# ─────────────────────────────────────────────────────────────
# Middleware
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_security_headers_and_no_server_header(async_client: AsyncClient):
    resp = await async_client.get("/healthz")
    assert resp.headers["x-content-type-options"] == "nosniff"
    assert resp.headers["x-frame-options"] == "DENY"
    assert resp.headers["x-xss-protection"] == "1; mode=block"
    assert "server" not in resp.headers


@pytest.mark.anyio
async def test_request_id_generated_and_echoed(async_client: AsyncClient):
    generated = await async_client.get("/healthz")
    assert uuid.UUID(generated.headers["x-request-id"]).version == 4

    rid = str(uuid.uuid4())
    echoed = await async_client.get("/healthz", headers={"X-Request-ID": rid})
    assert echoed.headers["x-request-id"] == rid

    untrusted = await async_client.get("/healthz", headers={"X-Request-ID": "<script>"})
    assert untrusted.headers["x-request-id"] != "<script>"


@pytest.mark.anyio
async def test_errors_carry_request_id(async_client: AsyncClient):
    rid = str(uuid.uuid4())
    resp = await async_client.get("/api/auth/profile", headers={"X-Request-ID": rid})
    assert resp.status_code == 401
    assert resp.json()["request_id"] == rid
    assert resp.json()["instance"] == "/api/auth/profile"


@pytest.mark.anyio
async def test_cors_allows_configured_origin(async_client: AsyncClient):
    origin = settings.frontend_origins_list[0]
    resp = await async_client.options(
        "/api/reviews/movie/1",
        headers={"Origin": origin, "Access-Control-Request-Method": "GET"},
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == origin


@pytest.mark.anyio
async def test_cors_rejects_unknown_origin(async_client: AsyncClient):
    resp = await async_client.options(
        "/api/reviews/movie/1",
        headers={"Origin": "https://evil.example", "Access-Control-Request-Method": "GET"},
    )
    assert "access-control-allow-origin" not in resp.headers


@pytest.mark.anyio
async def test_oversized_body_is_413(monkeypatch):
    monkeypatch.setattr(settings, "MAX_BODY_BYTES", 2048)
    app = create_app()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.post(
            "/api/auth/register",
            content=b"{" + b" " * 4096 + b"}",
            headers={"Content-Type": "application/json"},
        )
    assert resp.status_code == 413
    assert resp.json()["code"] == "payload_too_large"


@pytest.mark.anyio
async def test_streamed_body_without_length_is_413(monkeypatch):
    monkeypatch.setattr(settings, "MAX_BODY_BYTES", 2048)
    app = create_app()

    async def _chunks():
        for _ in range(4):
            yield b" " * 1024

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.post(
            "/api/auth/register", content=_chunks(), headers={"Content-Type": "application/json"}
        )
    assert resp.status_code == 413
    assert resp.json()["code"] == "payload_too_large"
    assert resp.headers["content-type"].startswith("application/problem+json")


@pytest.mark.anyio
async def test_malformed_json_is_400(async_client: AsyncClient):
    resp = await async_client.post(
        "/api/auth/login", content=b"{not json", headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "validation_error"
    assert resp.headers["content-type"].startswith("application/problem+json")


@pytest.mark.anyio
async def test_unknown_route_is_problem_json(async_client: AsyncClient):
    resp = await async_client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.json()["status"] == 404
