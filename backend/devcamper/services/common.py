"""
DevCamper API — Shared Service Helpers
=======================================

Ownership checks and the flush wrapper used by every resource service.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.exceptions import ConflictError, ForbiddenError
from devcamper.models.user import User

logger = logging.getLogger(__name__)


def ensure_owner_or_admin(
    owner_id: uuid.UUID,
    user: User,
    action: str,
    resource: str,
    resource_id: Optional[uuid.UUID] = None,
) -> None:
    """
    Raises:
        ForbiddenError: `user` neither owns the resource nor is an admin
    """
    if user.is_admin or owner_id == user.id:
        return
    target = f"{resource} {resource_id}" if resource_id else resource
    raise ForbiddenError(
        message=f"User {user.id} is not authorized to {action} {target}",
        context={"user_id": str(user.id), "owner_id": str(owner_id)},
    )


def is_unique_violation(error: IntegrityError) -> bool:
    # sqlite: "UNIQUE constraint failed"; postgres: "duplicate key value violates unique constraint"
    text = str(error.orig)
    return "UNIQUE" in text.upper() or "duplicate key" in text


async def flush_or_conflict(
    db: AsyncSession, message: str = "Duplicate field value entered"
) -> None:
    """
    Flush pending writes so constraint violations surface inside the handler.

    The uniqueness constraints are the source of truth for one-per-owner
    rules; a pre-check only produces a friendlier message for the common case.

    Raises:
        ConflictError: a unique constraint rejected the write
        IntegrityError: any other constraint violation (→ 400 by the normalizer)
    """
    try:
        await db.flush()
    except IntegrityError as e:
        if is_unique_violation(e):
            logger.info("Unique constraint rejected write: %s", e.orig)
            raise ConflictError(message=message, context={"constraint": str(e.orig)})
        raise
