"""
DevCamper API — Review Service
===============================

What:  Review CRUD. One review per (user, bootcamp), enforced by the
       `uq_reviews_bootcamp_user` constraint.
How:   After every review write the parent bootcamp's `average_rating` is
       recomputed (mean rating, NULL when none remain).
"""

import logging
import uuid
from typing import Any, Dict, Optional

from pydantic.alias_generators import to_camel
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from devcamper.exceptions import ConflictError, NotFoundError
from devcamper.models.bootcamp import Bootcamp
from devcamper.models.review import Review
from devcamper.models.user import User
from devcamper.schemas.review import ReviewCreate, ReviewRead, ReviewUpdate
from devcamper.services.advanced_results import Eager, ResourceFields
from devcamper.services.common import ensure_owner_or_admin, flush_or_conflict
from devcamper.services.course_service import serialize_bootcamp_summary

logger = logging.getLogger(__name__)

DUPLICATE_REVIEW = "User has already submitted a review for this bootcamp"

REVIEW_FIELDS = ResourceFields(
    columns={
        "id": Review.id,
        "bootcamp": Review.bootcamp_id,
        "user": Review.user_id,
        "title": Review.title,
        "rating": Review.rating,
        "createdAt": Review.created_at,
    },
    selectable=[to_camel(name) for name in ReviewRead.model_fields],
)


def serialize_review(review: Review) -> Dict[str, Any]:
    return ReviewRead.from_model(review).model_dump(by_alias=True, mode="json")


REVIEW_EAGER = (
    Eager(key="bootcamp", relationship=Review.bootcamp, serialize=serialize_bootcamp_summary),
)


async def recompute_average_rating(db: AsyncSession, bootcamp_id: uuid.UUID) -> Optional[float]:
    mean = await db.scalar(
        select(func.avg(Review.rating)).where(Review.bootcamp_id == bootcamp_id)
    )
    average_rating = None if mean is None else float(mean)
    await db.execute(
        update(Bootcamp).where(Bootcamp.id == bootcamp_id).values(average_rating=average_rating)
    )
    logger.debug("Bootcamp %s average_rating=%s", bootcamp_id, average_rating)
    return average_rating


class ReviewService:
    async def get_review(
        self, db: AsyncSession, review_id: uuid.UUID, with_bootcamp: bool = False
    ) -> Review:
        stmt = select(Review).where(Review.id == review_id)
        if with_bootcamp:
            stmt = stmt.options(selectinload(Review.bootcamp))
        review = await db.scalar(stmt)
        if review is None:
            raise NotFoundError(resource="review", resource_id=str(review_id))
        return review

    async def existing_review_id(
        self, db: AsyncSession, bootcamp_id: uuid.UUID, user_id: uuid.UUID
    ) -> Optional[uuid.UUID]:
        return await db.scalar(
            select(Review.id).where(Review.bootcamp_id == bootcamp_id, Review.user_id == user_id)
        )

    async def create_review(
        self,
        db: AsyncSession,
        bootcamp_id: uuid.UUID,
        data: ReviewCreate,
        user: User,
    ) -> Review:
        """
        Raises:
            NotFoundError: no bootcamp with that id
            ConflictError: the user already reviewed this bootcamp
        """
        bootcamp = await db.get(Bootcamp, bootcamp_id)
        if bootcamp is None:
            raise NotFoundError(resource="bootcamp", resource_id=str(bootcamp_id))

        existing = await self.existing_review_id(db, bootcamp.id, user.id)
        if existing is not None:
            raise ConflictError(
                message=DUPLICATE_REVIEW,
                context={"review_id": str(existing)},
            )

        review = Review(
            **data.model_dump(exclude={"bootcamp"}),
            bootcamp_id=bootcamp.id,
            user_id=user.id,
        )
        db.add(review)
        await flush_or_conflict(db, message=DUPLICATE_REVIEW)
        await recompute_average_rating(db, bootcamp.id)
        logger.info("Review created: %s for bootcamp %s", review.id, bootcamp.id)
        return review

    async def update_review(
        self,
        db: AsyncSession,
        review_id: uuid.UUID,
        data: ReviewUpdate,
        user: User,
    ) -> Review:
        review = await self.get_review(db, review_id)
        ensure_owner_or_admin(review.user_id, user, "update", "review", review.id)

        for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(review, key, value)
        await flush_or_conflict(db, message=DUPLICATE_REVIEW)
        await recompute_average_rating(db, review.bootcamp_id)
        return review

    async def delete_review(self, db: AsyncSession, review_id: uuid.UUID, user: User) -> None:
        review = await self.get_review(db, review_id)
        ensure_owner_or_admin(review.user_id, user, "delete", "review", review.id)

        bootcamp_id = review.bootcamp_id
        await db.delete(review)
        await db.flush()
        await recompute_average_rating(db, bootcamp_id)
        logger.info("Review deleted: %s", review_id)


review_service = ReviewService()
