"""
DevCamper API — Authentication Package
=======================================

tokens:     signed bearer credentials (issue / verify)
passwords:  password hashing, reset tokens, Gravatar avatars
deps:       the auth gate and role gate FastAPI dependencies
"""

from devcamper.auth.deps import extract_token, get_current_user, require_roles
from devcamper.auth.tokens import TokenCodec

__all__ = ["TokenCodec", "extract_token", "get_current_user", "require_roles"]
