"""
DevCamper API — Auth Gate and Role Gate
========================================

What:  FastAPI dependencies that turn a request into an authenticated User and
       restrict routes to a set of roles.
How:   `get_current_user` resolves the credential, verifies it with the
       app's TokenCodec, loads the user and rejects tokens issued before the
       last password change. `require_roles` layers a role check on top.

Credential sources, in order:
    1. Authorization: Bearer <jwt>
    2. `token` cookie (set by /auth/login)
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.auth.tokens import TokenCodec
from devcamper.database import get_db_session
from devcamper.exceptions import ForbiddenError, UnauthorizedError
from devcamper.models.user import User
from devcamper.utils import as_utc

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "token"

_bearer = HTTPBearer(auto_error=False)


def extract_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = None,
) -> Optional[str]:
    # Prefer Bearer token when explicitly provided
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    token = request.cookies.get(TOKEN_COOKIE)
    # /auth/logout overwrites the cookie with this placeholder
    if token and token != "none":
        return token
    return None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """
    Authenticate a request.

    Raises:
        UnauthorizedError: no credential, bad/expired token, unknown user, or
                           password changed after the token was issued
    """
    token = extract_token(request, credentials)
    if not token:
        raise UnauthorizedError()

    codec: TokenCodec = request.app.state.token_codec
    payload = codec.verify(token)

    try:
        user_id = uuid.UUID(str(payload["sub"]))
    except (KeyError, ValueError):
        raise UnauthorizedError(context={"reason": "token_sub_invalid"})

    user = await db.get(User, user_id)
    if user is None:
        raise UnauthorizedError(context={"reason": "user_not_found"})

    if user.password_changed_at is not None:
        changed_at = int(as_utc(user.password_changed_at).timestamp())
        if changed_at > int(payload["iat"]):
            raise UnauthorizedError(
                message="User recently changed password! Please log in again.",
                context={"user_id": str(user.id)},
            )

    request.state.user = user
    return user


def require_roles(*roles: str) -> Callable:
    """
    Dependency factory restricting a route to the given roles.

    Usage:
        @router.post("/", dependencies=[Depends(require_roles("publisher", "admin"))])
        async def create(..., user: User = Depends(require_roles("publisher", "admin")))
    """
    allowed = frozenset(roles)

    async def _check(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise ForbiddenError(
                message=f"User role {user.role} is not authorized to access this route",
                context={"user_id": str(user.id), "allowed": sorted(allowed)},
            )
        return user

    return _check
