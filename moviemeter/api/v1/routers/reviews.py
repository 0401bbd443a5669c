# ╔══════════════════════════════════════════════════════════════════════════╗
# ║ MovieMeter · Reviews API                                                  ║
# ╠──────────────────────────────────────────────────────────────────────────╣
# ║  - POST   /reviews                     → Create review (201, auth)        ║
# ║  - GET    /reviews/movie/{movie_id}    → Reviews for a movie (public)     ║
# ║  - GET    /reviews/user                → Caller's reviews (auth)          ║
# ║  - PUT    /reviews/{review_id}         → Edit own review (auth)           ║
# ║  - DELETE /reviews/{review_id}         → Delete own review (auth)         ║
# ╠──────────────────────────────────────────────────────────────────────────╣
# ║  - Listings are newest first.                                             ║
# ║  - The author is always the verified caller, never a body field.          ║
# ║  - User-specific responses return `Cache-Control: no-store`.              ║
# ╚══════════════════════════════════════════════════════════════════════════╝
"""
Review endpoints. Ownership, uniqueness and validation live in
`moviemeter.services.review_service.ReviewService`.
"""

from typing import List

from fastapi import APIRouter, Depends, Path, Response, status

from moviemeter.dependencies.auth import Identity, require_identity
from moviemeter.schemas.review import DeleteConfirmationOut, ReviewCreate, ReviewOut, ReviewUpdate
from moviemeter.security_headers import set_sensitive_cache
from moviemeter.services.review_service import ReviewService, get_review_service

router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.post(
    "",
    response_model=ReviewOut,
    status_code=status.HTTP_201_CREATED,
    summary="Review a movie",
)
async def create_review(
    payload: ReviewCreate,
    identity: Identity = Depends(require_identity),
    service: ReviewService = Depends(get_review_service),
) -> ReviewOut:
    review = await service.create(
        identity.user_id, payload.movie_id, payload.movie_title, payload.rating, payload.comment
    )
    return ReviewOut.model_validate(review)


@router.get("/movie/{movie_id}", response_model=List[ReviewOut], summary="Reviews for a movie")
async def list_movie_reviews(
    movie_id: str = Path(..., description="External catalog key"),
    service: ReviewService = Depends(get_review_service),
) -> List[ReviewOut]:
    return [ReviewOut.model_validate(r) for r in await service.list_by_movie(movie_id)]


@router.get("/user", response_model=List[ReviewOut], summary="The caller's reviews")
async def list_my_reviews(
    response: Response,
    identity: Identity = Depends(require_identity),
    service: ReviewService = Depends(get_review_service),
) -> List[ReviewOut]:
    set_sensitive_cache(response)
    return [ReviewOut.model_validate(r) for r in await service.list_by_user(identity.user_id)]


@router.put("/{review_id}", response_model=ReviewOut, summary="Edit own review")
async def update_review(
    payload: ReviewUpdate,
    review_id: str = Path(...),
    identity: Identity = Depends(require_identity),
    service: ReviewService = Depends(get_review_service),
) -> ReviewOut:
    review = await service.update(identity.user_id, review_id, payload.rating, payload.comment)
    return ReviewOut.model_validate(review)


@router.delete("/{review_id}", response_model=DeleteConfirmationOut, summary="Delete own review")
async def delete_review(
    review_id: str = Path(...),
    identity: Identity = Depends(require_identity),
    service: ReviewService = Depends(get_review_service),
) -> DeleteConfirmationOut:
    return DeleteConfirmationOut.model_validate(await service.delete(identity.user_id, review_id))


__all__ = ["router"]
