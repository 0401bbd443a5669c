import pytest
from httpx import AsyncClient

LOGIN = "/api/auth/login"


# ─────────────────────────────────────────────────────────────
# /auth/login
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_login_success(async_client: AsyncClient, create_test_user, token_service):
    user = await create_test_user(email="login@example.com", password="Password123!")

    resp = await async_client.post(LOGIN, json={"email": "login@example.com", "password": "Password123!"})
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["user"]["id"] == str(user.id)
    assert "password" not in resp.text.lower()
    assert resp.headers["cache-control"] == "no-store"

    claims = token_service.verify(data["token"])
    assert claims.user_id == user.id


@pytest.mark.anyio
async def test_login_email_is_case_insensitive(async_client: AsyncClient, create_test_user):
    await create_test_user(email="mixed@example.com", password="Password123!")

    resp = await async_client.post(LOGIN, json={"email": "  MIXED@Example.com ", "password": "Password123!"})
    assert resp.status_code == 200


@pytest.mark.anyio
async def test_login_wrong_password(async_client: AsyncClient, create_test_user):
    await create_test_user(email="wrongpass@example.com", password="Correct1!")

    resp = await async_client.post(LOGIN, json={"email": "wrongpass@example.com", "password": "nope-nope"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid credentials"


@pytest.mark.anyio
async def test_login_unknown_email_is_indistinguishable(async_client: AsyncClient, create_test_user):
    await create_test_user(email="known@example.com", password="Correct1!")

    unknown = await async_client.post(LOGIN, json={"email": "ghost@example.com", "password": "Correct1!"})
    wrong = await async_client.post(LOGIN, json={"email": "known@example.com", "password": "Wrong1!!"})

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json()["detail"] == wrong.json()["detail"]
    assert unknown.json()["code"] == wrong.json()["code"] == "invalid_credentials"


@pytest.mark.anyio
@pytest.mark.parametrize("payload", [{}, {"email": "a@example.com"}, {"password": "secret123"}])
async def test_login_missing_fields(async_client: AsyncClient, payload):
    resp = await async_client.post(LOGIN, json=payload)
    assert resp.status_code == 400
