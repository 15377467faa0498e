"""
DevCamper API — Auth Routes
============================

What:  Registration, login/logout, profile and password management.
How:   Successful authentication responds with {success, token} and sets an
       httpOnly `token` cookie carrying the same credential, so both API
       clients (Bearer header) and browsers (cookie) work.

Cookie:
    max-age = jwt_cookie_expire_days, httpOnly, SameSite=Lax,
    Secure in production
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.auth.deps import TOKEN_COOKIE, get_current_user
from devcamper.auth.tokens import TokenCodec
from devcamper.config import Settings
from devcamper.database import get_db_session
from devcamper.dependencies import get_settings, get_token_codec
from devcamper.models.user import User
from devcamper.schemas.common import Envelope, ErrorResponse, TokenResponse
from devcamper.schemas.user import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateDetailsRequest,
    UpdatePasswordRequest,
    UserRead,
)
from devcamper.services.auth_service import auth_service
from devcamper.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])

ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
}


def send_token_response(
    user: User,
    codec: TokenCodec,
    settings: Settings,
    status_code: int = 200,
) -> JSONResponse:
    token = codec.issue(
        principal_id=user.id, name=user.name, email=user.email, role=user.role
    )
    response = JSONResponse(
        status_code=status_code,
        content=TokenResponse(token=token).model_dump(),
    )
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        max_age=settings.jwt_cookie_expire_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.environment == "production",
        samesite="lax",
    )
    return response


@router.post(
    "/register",
    status_code=201,
    response_model=TokenResponse,
    responses={**ERRORS, 409: {"model": ErrorResponse}},
    summary="Register a user or publisher",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
    codec: TokenCodec = Depends(get_token_codec),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    user = await auth_service.register(db, body)
    return send_token_response(user, codec, settings, status_code=201)


@router.post("/login", response_model=TokenResponse, responses=ERRORS)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
    codec: TokenCodec = Depends(get_token_codec),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    user = await auth_service.login(db, body.email, body.password)
    return send_token_response(user, codec, settings)


@router.get("/logout", response_model=Envelope[dict])
async def logout() -> JSONResponse:
    response = JSONResponse(content={"success": True, "data": {}})
    response.set_cookie(TOKEN_COOKIE, "none", max_age=10, httponly=True, samesite="lax")
    return response


@router.get("/me", response_model=Envelope[UserRead], responses=ERRORS)
async def me(user: User = Depends(get_current_user)) -> Envelope[UserRead]:
    return Envelope(data=UserRead.model_validate(user))


@router.put(
    "/updatedetails",
    response_model=Envelope[UserRead],
    responses={**ERRORS, 409: {"model": ErrorResponse}},
)
async def update_details(
    body: UpdateDetailsRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[UserRead]:
    user = await user_service.update_details(db, user, name=body.name, email=body.email)
    return Envelope(data=UserRead.model_validate(user))


@router.put("/updatepassword", response_model=TokenResponse, responses=ERRORS)
async def update_password(
    body: UpdatePasswordRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    codec: TokenCodec = Depends(get_token_codec),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    user = await auth_service.update_password(
        db, user, body.current_password, body.new_password
    )
    return send_token_response(user, codec, settings)


@router.post(
    "/forgotpassword",
    response_model=Envelope[str],
    responses={**ERRORS, 404: {"model": ErrorResponse}},
    description="Issues a reset token valid for a few minutes. Delivery is out of band.",
)
async def forgot_password(
    body: ForgotPasswordRequest,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> Envelope[str]:
    user, raw_token = await auth_service.forgot_password(
        db, body.email, settings.password_reset_expire_minutes
    )
    reset_url = f"{str(request.base_url).rstrip('/')}/api/v1/auth/resetpassword/{raw_token}"
    logger.info("Password reset requested for user %s: %s", user.id, reset_url)
    return Envelope(data="Password reset token issued")


@router.put("/resetpassword/{resettoken}", response_model=TokenResponse, responses=ERRORS)
async def reset_password(
    resettoken: str,
    body: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db_session),
    codec: TokenCodec = Depends(get_token_codec),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    user = await auth_service.reset_password(db, resettoken, body.password)
    return send_token_response(user, codec, settings)
