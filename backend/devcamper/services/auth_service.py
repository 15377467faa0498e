"""
DevCamper API — Auth Service
=============================

What:  Registration, login, password change and the forgot/reset password
       flow.
How:   Delegates persistence to UserService; credential checks use the
       passlib helpers. Token issuance stays in the route layer, which owns
       the cookie.

Reset flow:
    1. forgot_password(): random token, sha256 digest + expiry stored
    2. The raw token is embedded in a reset URL (logged; email delivery is
       not part of this service)
    3. reset_password(): digest lookup, expiry check, new password, token cleared
"""

import logging
from datetime import timedelta
from typing import Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.auth.passwords import generate_reset_token, hash_reset_token, verify_password
from devcamper.exceptions import BadRequestError, NotFoundError, UnauthorizedError
from devcamper.models.user import User
from devcamper.schemas.user import RegisterRequest
from devcamper.services.user_service import set_password, user_service
from devcamper.utils import as_utc, utcnow

logger = logging.getLogger(__name__)


class AuthService:
    async def register(self, db: AsyncSession, data: RegisterRequest) -> User:
        return await user_service.create_user(
            db, data.name, data.email, data.password, data.role
        )

    async def login(self, db: AsyncSession, email: str, password: str) -> User:
        """
        Raises:
            UnauthorizedError: unknown email or wrong password (same message for both)
        """
        user = await user_service.get_by_email(db, email)
        if user is None or not verify_password(password, user.password_hash):
            raise UnauthorizedError(message="Invalid credentials")
        logger.info("User logged in: %s", user.id)
        return user

    async def update_password(
        self,
        db: AsyncSession,
        user: User,
        current_password: str,
        new_password: str,
    ) -> User:
        if not verify_password(current_password, user.password_hash):
            raise UnauthorizedError(message="Password is incorrect")
        set_password(user, new_password)
        await db.flush()
        logger.info("Password changed for user %s", user.id)
        return user

    async def forgot_password(
        self, db: AsyncSession, email: str, expire_minutes: int
    ) -> Tuple[User, str]:
        """
        Returns:
            (user, raw reset token)

        Raises:
            NotFoundError: no user with that email
        """
        user = await user_service.get_by_email(db, email)
        if user is None:
            raise NotFoundError(resource="user", context={"email": email})

        raw, digest = generate_reset_token()
        user.reset_password_token = digest
        user.reset_password_expire = utcnow() + timedelta(minutes=expire_minutes)
        await db.flush()
        return user, raw

    async def reset_password(self, db: AsyncSession, raw_token: str, password: str) -> User:
        """
        Raises:
            BadRequestError: unknown or expired reset token
        """
        user = await db.scalar(
            select(User).where(User.reset_password_token == hash_reset_token(raw_token))
        )
        if (
            user is None
            or user.reset_password_expire is None
            or as_utc(user.reset_password_expire) <= utcnow()
        ):
            raise BadRequestError(message="Invalid token", field="resettoken")

        set_password(user, password)
        user.reset_password_token = None
        user.reset_password_expire = None
        await db.flush()
        logger.info("Password reset for user %s", user.id)
        return user


auth_service = AuthService()
