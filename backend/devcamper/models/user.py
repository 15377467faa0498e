"""
DevCamper API — User SQLAlchemy Model
======================================

What:  ORM model for the `users` table (the authenticated Principal).
Who:   Loaded by the auth gate on every protected request; written by the
       auth and user services.

Table Design:
    - email: unique, always stored lowercase (normalized by the service layer)
    - role: restricted to admin/user/publisher by a CHECK constraint
    - password_hash: never serialized; schemas have no field for it
    - password_changed_at: compared against a token's `iat` by the auth gate
    - reset_password_token: sha256 hex of the raw token mailed to the user
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import CheckConstraint, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devcamper.database import Base

if TYPE_CHECKING:
    from devcamper.models.bootcamp import Bootcamp
    from devcamper.models.review import Review

ROLES = ("admin", "user", "publisher")


class User(Base):
    """
    Lifecycle:
        1. Created by /auth/register or by an admin via /users
        2. Password/details updated by the owner; role updated by an admin
        3. Deleted by an admin (reviews removed with it)
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user")
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    password_changed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    reset_password_token: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    reset_password_expire: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    avatar: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    bootcamps: Mapped[List["Bootcamp"]] = relationship(back_populates="owner")
    reviews: Mapped[List["Review"]] = relationship(back_populates="author")

    __table_args__ = (
        CheckConstraint(
            "role IN ('admin', 'user', 'publisher')", name="ck_users_role"
        ),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
