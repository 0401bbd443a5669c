# moviemeter/services/review_service.py
from __future__ import annotations

"""
Review service: create / edit / delete / list movie reviews
============================================================

Order of checks for mutations: **existence → ownership → validation →
persist**. A foreign review is therefore reported as `Forbidden` even when the
submitted payload is also invalid, and a missing (or malformed) id is always
`NotFound`.

Uniqueness of (user, movie) is pre-checked for a friendly error, but the
store's constraint is what settles two concurrent submits: exactly one
succeeds, the other gets `DuplicateReview`.

`review_count` on the author is advisory. It is adjusted (never below zero)
before the review write, and the SQL stores commit both in one transaction:
a failed insert or delete rolls the counter back with it.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional
from uuid import UUID

from fastapi import Depends

from moviemeter.core.exceptions import DuplicateReview, Forbidden, NotFound
from moviemeter.repositories.reviews import (
    ReviewRecord,
    ReviewRepositoryProtocol,
    get_review_repository,
)
from moviemeter.repositories.users import UserRepositoryProtocol, get_user_repository
from moviemeter.utils.validators import (
    validate_comment,
    validate_movie_id,
    validate_movie_title,
    validate_rating,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeleteConfirmation:
    message: str
    id: UUID


class ReviewService:
    def __init__(self, reviews: ReviewRepositoryProtocol, users: UserRepositoryProtocol) -> None:
        self.reviews = reviews
        self.users = users

    async def _owned(self, requesting_user_id: UUID, review_id: UUID | str, action: str) -> ReviewRecord:
        review = await self.reviews.find_by_id(review_id)
        if review is None:
            raise NotFound("Review not found")
        if review.user_id != requesting_user_id:
            logger.warning(f"User {requesting_user_id} tried to {action} review {review.id} they do not own")
            raise Forbidden(f"Not authorized to {action} this review")
        return review

    # ─────────────────────────────────────────────────────────────
    # ✍️ Create
    # ─────────────────────────────────────────────────────────────
    async def create(
        self,
        user_id: UUID,
        movie_id: Optional[str],
        movie_title: Optional[str],
        rating: Any,
        comment: Optional[str] = "",
    ) -> ReviewRecord:
        mid = validate_movie_id(movie_id)
        title = validate_movie_title(movie_title)
        stars = validate_rating(rating)
        text = validate_comment(comment)

        if await self.reviews.find_by_user_and_movie(user_id, mid) is not None:
            raise DuplicateReview()

        # counter first: the review write commits both
        await self.users.adjust_review_count(user_id, +1)
        review = await self.reviews.insert(
            user_id=user_id, movie_id=mid, movie_title=title, rating=stars, comment=text
        )
        logger.info(f"Review {review.id} created by {user_id} for movie {mid}")
        return review

    # ─────────────────────────────────────────────────────────────
    # 🔁 Update
    # ─────────────────────────────────────────────────────────────
    async def update(
        self,
        requesting_user_id: UUID,
        review_id: UUID | str,
        rating: Any,
        comment: Optional[str] = "",
    ) -> ReviewRecord:
        review = await self._owned(requesting_user_id, review_id, "update")
        return await self.reviews.update(
            review.id, rating=validate_rating(rating), comment=validate_comment(comment)
        )

    # ─────────────────────────────────────────────────────────────
    # 🗑️ Delete
    # ─────────────────────────────────────────────────────────────
    async def delete(self, requesting_user_id: UUID, review_id: UUID | str) -> DeleteConfirmation:
        review = await self._owned(requesting_user_id, review_id, "delete")
        await self.users.adjust_review_count(requesting_user_id, -1)
        await self.reviews.remove(review.id)
        logger.info(f"Review {review.id} deleted by {requesting_user_id}")
        return DeleteConfirmation(message="Review deleted", id=review.id)

    # ─────────────────────────────────────────────────────────────
    # 📚 Listings (newest first)
    # ─────────────────────────────────────────────────────────────
    async def list_by_movie(self, movie_id: Optional[str]) -> List[ReviewRecord]:
        return await self.reviews.find_by_movie(validate_movie_id(movie_id))

    async def list_by_user(self, user_id: UUID) -> List[ReviewRecord]:
        return await self.reviews.find_by_user(user_id)


def get_review_service(
    reviews: ReviewRepositoryProtocol = Depends(get_review_repository),
    users: UserRepositoryProtocol = Depends(get_user_repository),
) -> ReviewService:
    return ReviewService(reviews, users)


__all__ = ["DeleteConfirmation", "ReviewService", "get_review_service"]
