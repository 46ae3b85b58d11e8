from __future__ import annotations

from fastapi import APIRouter

from app.api.routes import auth, bookings

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
