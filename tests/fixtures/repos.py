# tests/fixtures/repos.py
"""
🗃️ Store + service fixtures backed by the in-memory repositories.
"""

import pytest

from moviemeter.repositories.reviews import MemoryReviewRepository
from moviemeter.repositories.users import MemoryUserRepository
from moviemeter.services.account_service import AccountService
from moviemeter.services.review_service import ReviewService
from moviemeter.services.token_service import TokenService

TEST_SECRET = "moviemeter-test-secret"


@pytest.fixture()
def user_repo() -> MemoryUserRepository:
    return MemoryUserRepository()


@pytest.fixture()
def review_repo() -> MemoryReviewRepository:
    return MemoryReviewRepository()


@pytest.fixture()
def token_service() -> TokenService:
    return TokenService(TEST_SECRET, algorithm="HS256", ttl_days=7)


@pytest.fixture()
def account_service(user_repo, token_service) -> AccountService:
    return AccountService(user_repo, token_service)


@pytest.fixture()
def review_service(review_repo, user_repo) -> ReviewService:
    return ReviewService(review_repo, user_repo)
