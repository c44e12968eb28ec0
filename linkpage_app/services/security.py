"""
Password hashing and signed token helpers.

Passwords: bcrypt.
Tokens: HS256 JWTs carrying {sub, email, type, exp, jti}. Access and refresh
tokens share the secret and are told apart by `type`; the jti makes every
refresh token unique so rotation never collides on the unique column.
"""

import uuid
from datetime import datetime
from typing import Any, Dict

import bcrypt
import jwt

from linkpage_app.config import settings
from linkpage_app.exceptions import UnauthorizedError
from linkpage_app.utils import parse_duration, utcnow

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=10)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # malformed hash in the database
        return False


def token_expiry(token_type: str) -> datetime:
    lifetime = (
        settings.access_token_expiration
        if token_type == ACCESS_TOKEN
        else settings.refresh_token_expiration
    )
    return utcnow() + parse_duration(lifetime)


def create_token(user_id: str, email: str, token_type: str) -> str:
    payload = {
        "sub": user_id,
        "email": email,
        "type": token_type,
        "exp": token_expiry(token_type),
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, token_type: str, verify_exp: bool = True) -> Dict[str, Any]:
    """
    Verify signature, expiry and type of a token.

    Refresh tokens are decoded with verify_exp=False: their expiry is checked
    against the stored row so an expired one can be deleted on the spot.

    Raises:
        UnauthorizedError: if the token is expired, tampered with, or of the
            wrong type.
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"verify_exp": verify_exp},
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token expired")
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid token")

    if payload.get("type") != token_type or not payload.get("sub"):
        raise UnauthorizedError("Invalid token")
    return payload
