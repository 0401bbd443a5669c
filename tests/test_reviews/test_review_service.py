import uuid

import anyio
import pytest

from moviemeter.core.exceptions import DuplicateReview, Forbidden, NotFound, ValidationFailed
from moviemeter.services.review_service import ReviewService


async def _create(service: ReviewService, user_id, movie_id="603", **kwargs):
    params = {"movie_title": "The Matrix", "rating": 4, "comment": "Good"}
    params.update(kwargs)
    return await service.create(user_id, movie_id, params["movie_title"], params["rating"], params["comment"])


# ─────────────────────────────────────────────────────────────
# Create
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_create_then_list_by_movie(review_service, create_test_user, user_repo):
    user = await create_test_user()
    review = await _create(review_service, user.id, rating=5, comment="  Classic  ")

    listed = await review_service.list_by_movie("603")
    assert [r.id for r in listed] == [review.id]
    assert listed[0].user_id == user.id
    assert listed[0].rating == 5
    assert listed[0].comment == "Classic"
    assert (await user_repo.find_by_id(user.id)).review_count == 1


@pytest.mark.anyio
async def test_second_review_of_same_movie_is_rejected(review_service, create_test_user):
    user = await create_test_user()
    await _create(review_service, user.id)

    with pytest.raises(DuplicateReview) as exc:
        await _create(review_service, user.id, rating=1)
    assert exc.value.message == "You have already reviewed this movie"


@pytest.mark.anyio
async def test_different_users_can_review_same_movie(review_service, create_test_user):
    a = await create_test_user()
    b = await create_test_user()
    await _create(review_service, a.id)
    await _create(review_service, b.id)

    assert len(await review_service.list_by_movie("603")) == 2


@pytest.mark.anyio
@pytest.mark.parametrize("rating", [0, 6, -1, None, True, 4.5, "5"])
async def test_rating_must_be_whole_star_between_one_and_five(review_service, create_test_user, rating):
    user = await create_test_user()

    with pytest.raises(ValidationFailed):
        await _create(review_service, user.id, rating=rating)
    assert await review_service.list_by_user(user.id) == []


@pytest.mark.anyio
@pytest.mark.parametrize("rating", [1, 2, 3, 4, 5])
async def test_every_star_value_is_accepted(review_service, create_test_user, rating):
    user = await create_test_user()
    assert (await _create(review_service, user.id, rating=rating)).rating == rating


@pytest.mark.anyio
async def test_comment_length_bounds(review_service, create_test_user):
    user = await create_test_user()

    with pytest.raises(ValidationFailed):
        await _create(review_service, user.id, movie_id="1", comment="x" * 1001)
    ok = await _create(review_service, user.id, movie_id="2", comment="x" * 1000)
    assert len(ok.comment) == 1000
    empty = await _create(review_service, user.id, movie_id="3", comment=None)
    assert empty.comment == ""


@pytest.mark.anyio
@pytest.mark.parametrize(
    "movie_id, movie_title",
    [("", "Title"), ("   ", "Title"), ("603", ""), ("603", "t" * 201), ("x" * 129, "Title")],
)
async def test_movie_fields_are_required(review_service, create_test_user, movie_id, movie_title):
    user = await create_test_user()
    with pytest.raises(ValidationFailed):
        await _create(review_service, user.id, movie_id=movie_id, movie_title=movie_title)


@pytest.mark.anyio
async def test_store_constraint_settles_race_past_precheck(review_service, review_repo, create_test_user, monkeypatch):
    user = await create_test_user()

    async def _nothing_yet(user_id, movie_id):
        return None

    monkeypatch.setattr(review_repo, "find_by_user_and_movie", _nothing_yet)
    await _create(review_service, user.id)

    with pytest.raises(DuplicateReview):
        await _create(review_service, user.id)
    assert len(await review_service.list_by_user(user.id)) == 1


@pytest.mark.anyio
async def test_concurrent_creates_exactly_one_wins(review_service, create_test_user):
    user = await create_test_user()
    outcomes = []

    async def attempt(rating):
        try:
            await _create(review_service, user.id, rating=rating)
            outcomes.append("ok")
        except DuplicateReview:
            outcomes.append("dup")

    async with anyio.create_task_group() as tg:
        for rating in (3, 4, 5):
            tg.start_soon(attempt, rating)

    assert sorted(outcomes) == ["dup", "dup", "ok"]
    assert len(await review_service.list_by_movie("603")) == 1


# ─────────────────────────────────────────────────────────────
# Update
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_owner_can_update(review_service, create_test_user):
    user = await create_test_user()
    review = await _create(review_service, user.id, rating=2)

    updated = await review_service.update(user.id, review.id, 5, "Changed my mind")
    assert updated.rating == 5
    assert updated.comment == "Changed my mind"
    assert updated.movie_id == review.movie_id
    assert updated.user_id == user.id


@pytest.mark.anyio
async def test_foreign_update_is_forbidden_and_review_unchanged(review_service, review_repo, create_test_user):
    owner = await create_test_user()
    intruder = await create_test_user()
    review = await _create(review_service, owner.id, rating=3, comment="Mine")

    with pytest.raises(Forbidden) as exc:
        await review_service.update(intruder.id, review.id, 1, "Hijacked")
    assert exc.value.message == "Not authorized to update this review"

    stored = await review_repo.find_by_id(review.id)
    assert (stored.rating, stored.comment) == (3, "Mine")


@pytest.mark.anyio
async def test_ownership_is_checked_before_validation(review_service, create_test_user):
    owner = await create_test_user()
    intruder = await create_test_user()
    review = await _create(review_service, owner.id)

    with pytest.raises(Forbidden):
        await review_service.update(intruder.id, review.id, 99, "x" * 5000)


@pytest.mark.anyio
async def test_owner_update_still_validated(review_service, create_test_user):
    user = await create_test_user()
    review = await _create(review_service, user.id, rating=4)

    with pytest.raises(ValidationFailed):
        await review_service.update(user.id, review.id, 6, "")
    assert (await review_service.list_by_user(user.id))[0].rating == 4


@pytest.mark.anyio
@pytest.mark.parametrize("review_id", [uuid.uuid4(), "not-a-uuid", ""])
async def test_update_unknown_review(review_service, create_test_user, review_id):
    user = await create_test_user()
    with pytest.raises(NotFound):
        await review_service.update(user.id, review_id, 3, "")


# ─────────────────────────────────────────────────────────────
# Delete
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_owner_can_delete(review_service, create_test_user, user_repo):
    user = await create_test_user()
    review = await _create(review_service, user.id)

    confirmation = await review_service.delete(user.id, review.id)
    assert confirmation.message == "Review deleted"
    assert confirmation.id == review.id
    assert await review_service.list_by_movie("603") == []
    assert (await user_repo.find_by_id(user.id)).review_count == 0

    with pytest.raises(NotFound):
        await review_service.delete(user.id, review.id)


@pytest.mark.anyio
async def test_deleted_review_frees_the_movie_for_a_new_one(review_service, create_test_user):
    user = await create_test_user()
    first = await _create(review_service, user.id)
    await review_service.delete(user.id, first.id)

    second = await _create(review_service, user.id, rating=1)
    assert second.id != first.id


@pytest.mark.anyio
async def test_foreign_delete_is_forbidden_and_review_kept(review_service, create_test_user):
    owner = await create_test_user()
    intruder = await create_test_user()
    review = await _create(review_service, owner.id)

    with pytest.raises(Forbidden) as exc:
        await review_service.delete(intruder.id, review.id)
    assert exc.value.message == "Not authorized to delete this review"
    assert [r.id for r in await review_service.list_by_movie("603")] == [review.id]


@pytest.mark.anyio
async def test_review_count_never_negative(user_repo, create_test_user):
    user = await create_test_user()
    await user_repo.adjust_review_count(user.id, -1)
    assert (await user_repo.find_by_id(user.id)).review_count == 0


# ─────────────────────────────────────────────────────────────
# Listings
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_listings_are_newest_first(review_service, create_test_user):
    a = await create_test_user()
    b = await create_test_user()
    first = await _create(review_service, a.id, movie_id="1")
    second = await _create(review_service, b.id, movie_id="1")
    third = await _create(review_service, a.id, movie_id="2")

    assert [r.id for r in await review_service.list_by_movie("1")] == [second.id, first.id]
    assert [r.id for r in await review_service.list_by_user(a.id)] == [third.id, first.id]


@pytest.mark.anyio
async def test_list_by_user_only_returns_own(review_service, create_test_user):
    a = await create_test_user()
    b = await create_test_user()
    await _create(review_service, a.id, movie_id="1")
    await _create(review_service, b.id, movie_id="2")

    mine = await review_service.list_by_user(a.id)
    assert {r.user_id for r in mine} == {a.id}


@pytest.mark.anyio
async def test_list_unknown_movie_is_empty(review_service):
    assert await review_service.list_by_movie("does-not-exist") == []


@pytest.mark.anyio
async def test_list_by_movie_rejects_blank_id(review_service):
    with pytest.raises(ValidationFailed):
        await review_service.list_by_movie("  ")
