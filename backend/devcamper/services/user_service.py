"""
DevCamper API — User Service
=============================

What:  Account creation and admin user management, plus the explicit
       pre-persist steps for users.

Pre-persist steps (called right before a write, never implicitly):
    prepare_new_user()  → lowercase email, hash password, derive avatar
    set_password()      → hash + stamp `password_changed_at`
    set_email()         → lowercase + re-derive avatar

Delete rules:
    - The user's reviews are removed and the affected ratings recomputed
    - A user who still owns bootcamps or authored courses cannot be deleted
      (ConflictError); their bootcamps must be removed or reassigned first
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional

from pydantic.alias_generators import to_camel
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.auth.passwords import gravatar_url, hash_password
from devcamper.exceptions import ConflictError, NotFoundError
from devcamper.models.bootcamp import Bootcamp
from devcamper.models.course import Course
from devcamper.models.review import Review
from devcamper.models.user import User
from devcamper.schemas.user import UserCreate, UserRead, UserUpdate
from devcamper.services.advanced_results import ResourceFields
from devcamper.services.common import flush_or_conflict
from devcamper.services.review_service import recompute_average_rating
from devcamper.utils import utcnow

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "A user with that email already exists"

USER_FIELDS = ResourceFields(
    columns={
        "id": User.id,
        "name": User.name,
        "email": User.email,
        "role": User.role,
        "createdAt": User.created_at,
    },
    selectable=[to_camel(name) for name in UserRead.model_fields],
)


def serialize_user(user: User) -> dict:
    return UserRead.model_validate(user).model_dump(by_alias=True, mode="json")


def set_email(user: User, email: str) -> None:
    user.email = email.strip().lower()
    user.avatar = gravatar_url(user.email)


def set_password(user: User, password: str, now: Optional[datetime] = None) -> None:
    """
    Hash and store a new password for an existing user.

    `password_changed_at` is stamped one second in the past: a token issued
    in the same second as the change must still be accepted by the auth gate.
    """
    now = now or utcnow()
    user.password_hash = hash_password(password)
    user.password_changed_at = now - timedelta(seconds=1)


def prepare_new_user(name: str, email: str, password: str, role: str = "user") -> User:
    user = User(name=name.strip(), role=role, password_hash=hash_password(password))
    set_email(user, email)
    return user


class UserService:
    async def get_user(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        return await db.scalar(select(User).where(User.email == email.strip().lower()))

    async def _ensure_email_free(
        self, db: AsyncSession, email: str, exclude_id: Optional[uuid.UUID] = None
    ) -> None:
        stmt = select(User.id).where(User.email == email.strip().lower())
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        if await db.scalar(stmt) is not None:
            raise ConflictError(message=DUPLICATE_EMAIL)

    async def create_user(
        self,
        db: AsyncSession,
        name: str,
        email: str,
        password: str,
        role: str = "user",
    ) -> User:
        await self._ensure_email_free(db, email)
        user = prepare_new_user(name, email, password, role)
        db.add(user)
        await flush_or_conflict(db, message=DUPLICATE_EMAIL)
        logger.info("User created: %s (role=%s)", user.id, user.role)
        return user

    async def admin_create_user(self, db: AsyncSession, data: UserCreate) -> User:
        return await self.create_user(db, data.name, data.email, data.password, data.role)

    async def update_details(
        self,
        db: AsyncSession,
        user: User,
        name: Optional[str] = None,
        email: Optional[str] = None,
        role: Optional[str] = None,
    ) -> User:
        if email is not None and email.strip().lower() != user.email:
            await self._ensure_email_free(db, email, exclude_id=user.id)
            set_email(user, email)
        if name is not None:
            user.name = name.strip()
        await flush_or_conflict(db, message=DUPLICATE_EMAIL)
        if role is not None and role != user.role:
            await self._change_role(db, user, role)
        return user

    async def _change_role(self, db: AsyncSession, user: User, role: str) -> None:
        """
        Re-key the user's bootcamps on `exclusive_owner_id`: the user's id for
        non-admin roles, NULL for admins. The unique constraint rejects a
        demotion that would leave a non-admin owning several bootcamps.

        Raises:
            ConflictError: the user owns more than one bootcamp and the new
                           role is not admin
        """
        user.role = role
        owned = (await db.scalars(select(Bootcamp).where(Bootcamp.user_id == user.id))).all()
        for bootcamp in owned:
            bootcamp.exclusive_owner_id = None if role == "admin" else user.id
        await flush_or_conflict(
            db,
            message=(
                f"User {user.id} owns {len(owned)} bootcamps; "
                f"a {role} may own at most one"
            ),
        )
        logger.info("User %s role changed to %s (%d bootcamps)", user.id, role, len(owned))

    async def admin_update_user(
        self, db: AsyncSession, user_id: uuid.UUID, data: UserUpdate
    ) -> User:
        user = await self.get_user(db, user_id)
        return await self.update_details(
            db, user, name=data.name, email=data.email, role=data.role
        )

    async def delete_user(self, db: AsyncSession, user_id: uuid.UUID) -> None:
        """
        Raises:
            NotFoundError: no such user
            ConflictError: the user still owns bootcamps or authored courses
        """
        user = await self.get_user(db, user_id)

        owned = await db.scalar(
            select(func.count()).select_from(Bootcamp).where(Bootcamp.user_id == user.id)
        )
        authored = await db.scalar(
            select(func.count()).select_from(Course).where(Course.user_id == user.id)
        )
        if owned or authored:
            raise ConflictError(
                message=(
                    f"User {user.id} still owns {owned} bootcamp(s) and {authored} "
                    "course(s); remove them first"
                ),
                context={"user_id": str(user.id)},
            )

        reviewed = (
            await db.scalars(select(Review.bootcamp_id).where(Review.user_id == user.id))
        ).all()
        await db.execute(delete(Review).where(Review.user_id == user.id))
        for bootcamp_id in set(reviewed):
            await recompute_average_rating(db, bootcamp_id)

        await db.execute(delete(User).where(User.id == user.id))
        await db.flush()
        logger.info("User deleted: %s (%d reviews removed)", user_id, len(reviewed))


user_service = UserService()
