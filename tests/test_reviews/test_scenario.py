"""
End-to-end walk through the public surface: two users, one review, an
attempted takeover, a public read and a delete.
"""

import pytest
from httpx import AsyncClient

from tests.utils.factory import review_payload


async def _register_and_login(client: AsyncClient, name: str, email: str) -> dict:
    resp = await client.post("/api/auth/register", json={"name": name, "email": email, "password": "secret123"})
    assert resp.status_code == 201, resp.text
    resp = await client.post("/api/auth/login", json={"email": email, "password": "secret123"})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.mark.anyio
async def test_review_lifecycle_across_two_users(async_client: AsyncClient):
    alice = await _register_and_login(async_client, "Alice", "alice@example.com")
    resp = await async_client.post("/api/reviews", json=review_payload("42", rating=5), headers=alice)
    assert resp.status_code == 201
    review_id = resp.json()["id"]

    bob = await _register_and_login(async_client, "Bob", "bob@example.com")
    resp = await async_client.put(f"/api/reviews/{review_id}", json={"rating": 1, "comment": "meh"}, headers=bob)
    assert resp.status_code == 403

    resp = await async_client.get("/api/reviews/movie/42", headers=bob)
    assert resp.status_code == 200
    assert [(r["id"], r["rating"]) for r in resp.json()] == [(review_id, 5)]

    resp = await async_client.delete(f"/api/reviews/{review_id}", headers=alice)
    assert resp.status_code == 200
    assert (await async_client.get("/api/reviews/movie/42")).json() == []
