from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import get_settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=get_settings().bcrypt_rounds)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def generate_verification_token() -> str:
    return secrets.token_urlsafe(32)


def create_access_token(user_id: int, email: str) -> str:
    settings = get_settings()
    issued = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "email": email,
        "iat": int(issued.timestamp()),
        "exp": int((issued + timedelta(minutes=settings.access_token_exp_minutes)).timestamp()),
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def read_access_token(token: str) -> int:
    """Return the user id carried by a bearer token.

    Raises JWTError for bad signatures, expired tokens and missing subjects.
    """
    settings = get_settings()
    claims = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    subject = claims.get("sub")
    if not subject or not str(subject).isdigit():
        raise JWTError("Token has no user subject")
    return int(subject)
