"""
DevCamper API — User Administration Routes
===========================================

Every route requires an authenticated admin (router-level dependency).
"""

import uuid

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.auth.deps import require_roles
from devcamper.database import get_db_session
from devcamper.models.user import User
from devcamper.schemas.common import Envelope, ErrorResponse, ListEnvelope
from devcamper.schemas.user import UserCreate, UserRead, UserUpdate
from devcamper.services.advanced_results import AdvancedResults
from devcamper.services.user_service import USER_FIELDS, serialize_user, user_service

router = APIRouter(
    prefix="/api/v1/users",
    tags=["Users"],
    dependencies=[Depends(require_roles("admin"))],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)

user_results = AdvancedResults(User, USER_FIELDS, serialize_user)


@router.get("", responses={200: {"model": ListEnvelope}, 400: {"model": ErrorResponse}})
async def list_users(request: Request, _=Depends(user_results)) -> dict:
    return request.state.advanced_results


@router.get("/{user_id}", response_model=Envelope[UserRead], responses={404: {"model": ErrorResponse}})
async def get_user(
    user_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)
) -> Envelope[UserRead]:
    user = await user_service.get_user(db, user_id)
    return Envelope(data=UserRead.model_validate(user))


@router.post(
    "",
    status_code=201,
    response_model=Envelope[UserRead],
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_user(
    body: UserCreate, db: AsyncSession = Depends(get_db_session)
) -> Envelope[UserRead]:
    user = await user_service.admin_create_user(db, body)
    return Envelope(data=UserRead.model_validate(user))


@router.put(
    "/{user_id}",
    response_model=Envelope[UserRead],
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_user(
    user_id: uuid.UUID, body: UserUpdate, db: AsyncSession = Depends(get_db_session)
) -> Envelope[UserRead]:
    user = await user_service.admin_update_user(db, user_id, body)
    return Envelope(data=UserRead.model_validate(user))


@router.delete(
    "/{user_id}",
    response_model=Envelope[dict],
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_user(
    user_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)
) -> Envelope[dict]:
    await user_service.delete_user(db, user_id)
    return Envelope(data={})
