import pytest
from httpx import AsyncClient

REGISTER = "/api/auth/register"


# ─────────────────────────────────────────────────────────────
# /auth/register
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_register_success(async_client: AsyncClient):
    resp = await async_client.post(
        REGISTER,
        json={"name": "  Ada Lovelace ", "email": "Ada@Example.COM", "password": "secret123"},
    )
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["message"] == "User registered successfully"
    user = data["user"]
    assert user["name"] == "Ada Lovelace"
    assert user["email"] == "ada@example.com"
    assert user["reviewCount"] == 0
    assert user["profileImage"] is None
    assert "token" not in data
    assert resp.headers["cache-control"] == "no-store"


@pytest.mark.anyio
async def test_register_never_exposes_password(async_client: AsyncClient):
    resp = await async_client.post(
        REGISTER, json={"name": "Grace", "email": "grace@example.com", "password": "secret123"}
    )
    assert resp.status_code == 201
    body = resp.text.lower()
    assert "password" not in body
    assert "secret123" not in body
    assert "$2b$" not in body


@pytest.mark.anyio
async def test_register_duplicate_email_case_insensitive(async_client: AsyncClient):
    first = await async_client.post(
        REGISTER, json={"name": "Alan", "email": "alan@example.com", "password": "secret123"}
    )
    assert first.status_code == 201

    resp = await async_client.post(
        REGISTER, json={"name": "Alan Two", "email": "ALAN@example.com", "password": "secret456"}
    )
    assert resp.status_code == 400
    problem = resp.json()
    assert problem["detail"] == "User already exists with this email"
    assert problem["code"] == "duplicate_email"
    assert resp.headers["content-type"].startswith("application/problem+json")


@pytest.mark.anyio
@pytest.mark.parametrize(
    "payload",
    [
        {"email": "x@example.com", "password": "secret123"},
        {"name": "Someone", "password": "secret123"},
        {"name": "Someone", "email": "x@example.com"},
        {"name": "   ", "email": "x@example.com", "password": "secret123"},
    ],
)
async def test_register_requires_all_fields(async_client: AsyncClient, payload):
    resp = await async_client.post(REGISTER, json=payload)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "All fields are required"


@pytest.mark.anyio
async def test_register_short_password(async_client: AsyncClient):
    resp = await async_client.post(
        REGISTER, json={"name": "Shorty", "email": "short@example.com", "password": "12345"}
    )
    assert resp.status_code == 400
    assert "at least 6" in resp.json()["detail"]


@pytest.mark.anyio
@pytest.mark.parametrize("email", ["not-an-email", "a@b", "two@@example.com", "sp ace@example.com"])
async def test_register_invalid_email(async_client: AsyncClient, email):
    resp = await async_client.post(
        REGISTER, json={"name": "Someone", "email": email, "password": "secret123"}
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "validation_error"


@pytest.mark.anyio
async def test_register_name_length_bounds(async_client: AsyncClient):
    resp = await async_client.post(
        REGISTER, json={"name": "x" * 51, "email": "long@example.com", "password": "secret123"}
    )
    assert resp.status_code == 400

    resp = await async_client.post(
        REGISTER, json={"name": "Jo", "email": "jo@example.com", "password": "secret123"}
    )
    assert resp.status_code == 201
