from __future__ import annotations

import logging

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.security import generate_verification_token, hash_password, verify_password
from app.models.auth_event import AuthEvent
from app.models.user import User
from app.services.mailer import send_email

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def mask_email(email: str) -> str:
    try:
        local, domain = email.split("@", 1)
    except ValueError:
        return "***"
    if len(local) <= 1:
        masked_local = "*"
    else:
        masked_local = local[0] + "*" * (len(local) - 1)
    return f"{masked_local}@{domain}"


def _record_event(db: Session, *, user_id: int | None, event_type: str, ip: str, user_agent: str, failure_reason: str = "") -> None:
    db.add(AuthEvent(user_id=user_id, event_type=event_type, ip_address=ip, user_agent=user_agent[:255], failure_reason=failure_reason))
    db.commit()


def _email_taken(db: Session, email_norm: str) -> bool:
    return db.execute(select(User.id).where(User.email == email_norm)).first() is not None


def build_verification_link(token: str) -> str:
    settings = get_settings()
    return f"{settings.public_base_url.rstrip('/')}{settings.api_prefix}/auth/verify-email?token={token}"


def register_user(
    db: Session,
    *,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    ip: str = "",
    user_agent: str = "",
) -> User:
    email_norm = normalize_email(email)
    if _email_taken(db, email_norm):
        raise HTTPException(status_code=409, detail="User already exists")

    token = generate_verification_token()
    user = User(
        first_name=first_name,
        last_name=last_name,
        email=email_norm,
        hashed_password=hash_password(password),
        is_verified=False,
        verification_token=token,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # concurrent signup with the same email won the unique constraint
        db.rollback()
        raise HTTPException(status_code=409, detail="User already exists") from e
    db.refresh(user)

    subject = "Verify your email"
    body = (
        f"Hi {first_name},\n\n"
        f"Please verify your email address by opening the link below:\n\n"
        f"{build_verification_link(token)}\n"
    )
    try:
        send_email(user.email, subject, body)
    except Exception as e:
        # An account nobody can verify is useless; let the user sign up again
        logger.exception("Verification email to %s failed", mask_email(user.email))
        db.delete(user)
        db.commit()
        raise HTTPException(status_code=500, detail="Failed to send verification email") from e

    _record_event(db, user_id=user.id, event_type="SIGNUP", ip=ip, user_agent=user_agent)
    logger.info("Registered user %s", user.id)
    return user


def verify_email_token(db: Session, *, token: str, ip: str = "", user_agent: str = "") -> User:
    if not token:
        raise HTTPException(status_code=400, detail="Invalid or expired verification token")

    user = db.execute(select(User).where(User.verification_token == token)).scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=400, detail="Invalid or expired verification token")

    user.is_verified = True
    user.verification_token = None
    db.commit()

    _record_event(db, user_id=user.id, event_type="EMAIL_VERIFIED", ip=ip, user_agent=user_agent)
    logger.info("Verified email for user %s", user.id)
    return user


def authenticate_user(db: Session, *, email: str, password: str, ip: str = "", user_agent: str = "") -> User:
    email_norm = normalize_email(email)
    user = db.execute(select(User).where(User.email == email_norm)).scalar_one_or_none()

    if not user:
        _record_event(db, user_id=None, event_type="LOGIN_FAIL", ip=ip, user_agent=user_agent, failure_reason="user_not_found")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    if not verify_password(password, user.hashed_password):
        _record_event(db, user_id=user.id, event_type="LOGIN_FAIL", ip=ip, user_agent=user_agent, failure_reason="bad_password")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    if not user.is_verified:
        _record_event(db, user_id=user.id, event_type="LOGIN_FAIL", ip=ip, user_agent=user_agent, failure_reason="email_not_verified")
        raise HTTPException(status_code=403, detail="Please verify your email before logging in")

    _record_event(db, user_id=user.id, event_type="LOGIN_SUCCESS", ip=ip, user_agent=user_agent)
    return user
