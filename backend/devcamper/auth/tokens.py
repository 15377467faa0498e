"""
DevCamper API — Token Codec
============================

What:  Issues and verifies HS256-signed bearer tokens.
How:   PyJWT. The payload carries the principal id (`sub`), display claims
       (`name`, `email`, `role`) and the `iat`/`exp` timestamps.
Who:   Auth routes issue tokens; the auth gate verifies them.

No I/O happens here. The signing secret and lifetime come from settings via
the application factory.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from devcamper.exceptions import ExpiredTokenError, InvalidTokenError

_JWT_ALG = "HS256"


class TokenCodec:
    def __init__(self, secret: str, expire_minutes: int):
        if not secret:
            raise ValueError("jwt_secret_blank")
        self._secret = secret
        self.expire_minutes = max(1, int(expire_minutes))

    def issue(
        self,
        *,
        principal_id: uuid.UUID,
        name: str,
        email: str,
        role: str,
        now: Optional[datetime] = None,
    ) -> str:
        """Sign a token valid for `expire_minutes` from `now` (default: current time)."""
        now = now or datetime.now(timezone.utc)
        exp = now + timedelta(minutes=self.expire_minutes)

        payload: Dict[str, Any] = {
            "sub": str(principal_id),
            "name": name,
            "email": email,
            "role": role,
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=_JWT_ALG)

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Decode and validate a token.

        Raises:
            ExpiredTokenError: signature valid but `exp` has passed
            InvalidTokenError: anything else (bad signature, garbage, missing claims)
        """
        if not token:
            raise InvalidTokenError()
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[_JWT_ALG],
                options={"require": ["sub", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredTokenError()
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(context={"reason": str(e)})
