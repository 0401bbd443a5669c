# tests/utils/factory.py

from typing import Optional
from uuid import uuid4

from moviemeter.core.security import get_password_hash
from moviemeter.repositories.users import UserRecord, UserRepositoryProtocol

DEFAULT_PASSWORD = "secret123"


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}-{uuid4().hex[:8]}@example.com"


async def create_user(
    repo: UserRepositoryProtocol,
    *,
    name: str = "Test User",
    email: Optional[str] = None,
    password: str = DEFAULT_PASSWORD,
) -> UserRecord:
    """✅ Create a user through the store with a real bcrypt hash."""
    return await repo.create_user(name, email or unique_email(), get_password_hash(password))


def review_payload(
    movie_id: str = "603",
    *,
    movie_title: str = "The Matrix",
    rating: int = 5,
    comment: str = "Still holds up.",
) -> dict:
    return {"movieId": movie_id, "movieTitle": movie_title, "rating": rating, "comment": comment}
