"""
Authentication helpers: password hashing, gravatar urls and JWT tokens.

Tokens carry `{"user": {"id": <user id>}}` and are read from the
`x-auth-token` header or from `Authorization: Bearer <token>`.
"""

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import urlencode

import bcrypt
import jwt
from fastapi import Depends, Header, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import Settings, get_settings

ALGORITHM = "HS256"
BCRYPT_ROUNDS = 10

security = HTTPBearer(auto_error=False)


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def gravatar_url(email: str, size: int = 200, rating: str = "pg", default: str = "mm") -> str:
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    query = urlencode({"s": str(size), "r": rating, "d": default})
    return f"//www.gravatar.com/avatar/{digest}?{query}"


def create_token(user_id: str, settings: Settings) -> str:
    payload = {
        "user": {"id": user_id},
        "exp": datetime.now(timezone.utc) + timedelta(seconds=settings.jwt_expires_seconds),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)


def decode_token(token: str, settings: Settings) -> str:
    """Return the user id stored in `token`. Raises jwt.InvalidTokenError."""
    payload = jwt.decode(token, settings.jwt_secret, algorithms=[ALGORITHM])
    user = payload.get("user") or {}
    user_id = user.get("id")
    if not isinstance(user_id, str):
        raise jwt.InvalidTokenError("token has no user id")
    return user_id


def get_current_user_id(
    x_auth_token: Optional[str] = Header(None),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
) -> str:
    token = x_auth_token
    if not token and credentials:
        token = credentials.credentials
    if not token:
        raise HTTPException(status_code=401, detail="No token, authorization denied")
    try:
        return decode_token(token, settings)
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Token is not valid")
