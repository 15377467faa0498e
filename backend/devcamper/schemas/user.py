"""
DevCamper API — User and Auth Schemas
======================================

What:  Request bodies for registration, login, profile and password changes,
       admin user management, plus the public user representation.
Security: no read model has a password field, so a hash can never be
          serialized by accident.
"""

import uuid
from typing import Literal, Optional

from pydantic import EmailStr, Field, model_validator

from devcamper.schemas.common import CamelModel, UTCDateTime

Role = Literal["admin", "user", "publisher"]


class PasswordConfirmMixin(CamelModel):
    """`passwordConfirm` is optional; when sent it must repeat `password`."""

    password_confirm: Optional[str] = None

    @model_validator(mode="after")
    def check_passwords_match(self):
        if self.password_confirm is not None and self.password_confirm != self.password:
            raise ValueError("Passwords do not match")
        return self


class UserRead(CamelModel):
    id: uuid.UUID
    name: str
    email: str
    role: str
    avatar: Optional[str] = None
    created_at: UTCDateTime


# ── Auth ──────────────────────────────────────────────────────────────────


class RegisterRequest(PasswordConfirmMixin):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    # Admin accounts are only created by other admins
    role: Literal["user", "publisher"] = "user"


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UpdateDetailsRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None


class UpdatePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=128)


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(PasswordConfirmMixin):
    password: str = Field(min_length=6, max_length=128)


# ── Admin user management ─────────────────────────────────────────────────


class UserCreate(PasswordConfirmMixin):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    role: Role = "user"


class UserUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
