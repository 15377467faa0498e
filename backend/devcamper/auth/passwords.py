"""
DevCamper API — Password and Credential Helpers
================================================

Password hashing uses passlib's pbkdf2_sha256 scheme. Reset tokens are random
hex strings; only their sha256 digest is stored, so a leaked database row
cannot be replayed against /auth/resetpassword.
"""

from __future__ import annotations

import hashlib
import secrets
from typing import Tuple

from passlib.context import CryptContext

_pwd = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

GRAVATAR_URL = "https://www.gravatar.com/avatar/{digest}?s=200&r=pg&d=mm"


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("password_blank")
    return _pwd.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return _pwd.verify(password, password_hash)
    except ValueError:
        # Unrecognized or corrupt hash
        return False


def hash_reset_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def generate_reset_token() -> Tuple[str, str]:
    """Returns (raw token for the user, digest for the database)."""
    raw = secrets.token_hex(20)
    return raw, hash_reset_token(raw)


def gravatar_url(email: str) -> str:
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    return GRAVATAR_URL.format(digest=digest)
