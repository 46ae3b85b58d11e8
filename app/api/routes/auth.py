from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from app.core.deps import get_current_user, get_db
from app.core.security import create_access_token
from app.models.user import User
from app.schemas.auth import LoginRequest, MessageResponse, SignupRequest, SignupResponse
from app.schemas.user import TokenResponse, UserOut
from app.services.auth_service import authenticate_user, register_user, verify_email_token

router = APIRouter()


def _client(request: Request) -> tuple[str, str]:
    ip = request.client.host if request.client else ""
    ua = request.headers.get("user-agent", "")
    return ip, ua


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, request: Request, db: Session = Depends(get_db)):
    ip, ua = _client(request)
    user = register_user(
        db,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=str(payload.email),
        password=payload.password,
        ip=ip,
        user_agent=ua,
    )
    return SignupResponse(user_id=user.id)


@router.get("/verify-email", response_model=MessageResponse)
def verify_email(request: Request, token: str = Query(default=""), db: Session = Depends(get_db)):
    ip, ua = _client(request)
    verify_email_token(db, token=token, ip=ip, user_agent=ua)
    return MessageResponse(message="Email verified successfully")


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, request: Request, db: Session = Depends(get_db)):
    ip, ua = _client(request)
    user = authenticate_user(db, email=str(payload.email), password=payload.password, ip=ip, user_agent=ua)
    token = create_access_token(user.id, user.email)
    return TokenResponse(access_token=token, user=UserOut.model_validate(user))


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user
