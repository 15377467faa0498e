"""
DevCamper API — Review Routes
==============================

Access:
    GET                        public
    POST                       user, admin (one review per bootcamp per user)
    PUT / DELETE               user, admin (review author or admin)
"""

import uuid

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.auth.deps import require_roles
from devcamper.database import get_db_session
from devcamper.exceptions import BadRequestError
from devcamper.models.review import Review
from devcamper.models.user import User
from devcamper.schemas.common import Envelope, ErrorResponse, ListEnvelope
from devcamper.schemas.review import ReviewCreate, ReviewRead, ReviewUpdate
from devcamper.services.advanced_results import AdvancedResults
from devcamper.services.review_service import (
    REVIEW_EAGER,
    REVIEW_FIELDS,
    review_service,
    serialize_review,
)

router = APIRouter(prefix="/api/v1", tags=["Reviews"])

review_results = AdvancedResults(
    Review,
    REVIEW_FIELDS,
    serialize_review,
    eager=REVIEW_EAGER,
    scope_param="bootcamp_id",
    scope_column=Review.bootcamp_id,
)
user_or_admin = require_roles("user", "admin")

ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.get("/reviews", responses={200: {"model": ListEnvelope}, 400: {"model": ErrorResponse}})
async def list_reviews(request: Request, _=Depends(review_results)) -> dict:
    return request.state.advanced_results


@router.get(
    "/bootcamps/{bootcamp_id}/reviews",
    responses={200: {"model": ListEnvelope}, 400: {"model": ErrorResponse}},
)
async def list_bootcamp_reviews(
    bootcamp_id: uuid.UUID, request: Request, _=Depends(review_results)
) -> dict:
    return request.state.advanced_results


@router.get("/reviews/{review_id}", response_model=Envelope[ReviewRead], responses=ERRORS)
async def get_review(
    review_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)
) -> Envelope[ReviewRead]:
    review = await review_service.get_review(db, review_id, with_bootcamp=True)
    return Envelope(data=ReviewRead.from_model(review, with_bootcamp=True))


@router.post(
    "/bootcamps/{bootcamp_id}/reviews",
    status_code=201,
    response_model=Envelope[ReviewRead],
    responses={**ERRORS, 409: {"model": ErrorResponse}},
)
async def create_bootcamp_review(
    bootcamp_id: uuid.UUID,
    body: ReviewCreate,
    user: User = Depends(user_or_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[ReviewRead]:
    review = await review_service.create_review(db, bootcamp_id, body, user)
    return Envelope(data=ReviewRead.from_model(review))


@router.post(
    "/reviews",
    status_code=201,
    response_model=Envelope[ReviewRead],
    responses={**ERRORS, 409: {"model": ErrorResponse}},
)
async def create_review(
    body: ReviewCreate,
    user: User = Depends(user_or_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[ReviewRead]:
    if body.bootcamp is None:
        raise BadRequestError(message="Please provide a bootcamp id", field="bootcamp")
    review = await review_service.create_review(db, body.bootcamp, body, user)
    return Envelope(data=ReviewRead.from_model(review))


@router.put("/reviews/{review_id}", response_model=Envelope[ReviewRead], responses=ERRORS)
async def update_review(
    review_id: uuid.UUID,
    body: ReviewUpdate,
    user: User = Depends(user_or_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[ReviewRead]:
    review = await review_service.update_review(db, review_id, body, user)
    return Envelope(data=ReviewRead.from_model(review))


@router.delete("/reviews/{review_id}", response_model=Envelope[dict], responses=ERRORS)
async def delete_review(
    review_id: uuid.UUID,
    user: User = Depends(user_or_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[dict]:
    await review_service.delete_review(db, review_id, user)
    return Envelope(data={})
