import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..auth import TOKEN_COOKIE, bearer, extract_token, get_current_admin
from ..config import settings
from ..db import get_db
from ..models import AdminUser
from ..ratelimit import AUTH_LIMIT_MESSAGE, auth_limit, limiter
from ..schemas.auth import ChangePasswordIn, LoginIn, ProfileIn, VerifyTokenIn
from ..services.auth_service import SessionService, serialize_admin
from ..services.content_base import validate_payload


router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/auth/login")
@limiter.shared_limit(auth_limit, scope="auth", error_message=AUTH_LIMIT_MESSAGE)
def login(request: Request, response: Response, payload: dict = Body(...), db: Session = Depends(get_db)):
    data = validate_payload(LoginIn, payload)
    result = SessionService(db).login(data.email, data.password)
    user, token = result["user"], result["token"]
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        max_age=settings.TOKEN_TTL_HOURS * 3600,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
    logger.info("admin login user_id=%s ip=%s", user.id, request.client.host if request.client else "-")
    return {"success": True, "message": "Login successful", "data": {"admin": serialize_admin(user), "token": token}}


@router.post("/auth/verify-token")
def verify_token(
    request: Request,
    payload: Optional[dict] = Body(None),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
):
    data = validate_payload(VerifyTokenIn, payload or {})
    token = data.token or extract_token(request, credentials)
    user = SessionService(db).verify(token or "")["user"]
    return {"success": True, "message": "Token is valid", "data": {"admin": serialize_admin(user), "valid": True}}


@router.get("/auth/me")
def me(user: AdminUser = Depends(get_current_admin), db: Session = Depends(get_db)):
    return {"success": True, "data": {"admin": serialize_admin(SessionService(db).me(user))}}


@router.post("/auth/logout")
def logout(request: Request, response: Response, db: Session = Depends(get_db)):
    SessionService(db).logout(request.cookies.get(TOKEN_COOKIE))
    response.delete_cookie(TOKEN_COOKIE)
    return {"success": True, "message": "Logout successful"}


@router.put("/auth/profile")
def update_profile(payload: dict = Body(...), user: AdminUser = Depends(get_current_admin), db: Session = Depends(get_db)):
    data = validate_payload(ProfileIn, payload)
    updated = SessionService(db).update_profile(user, data.first_name, data.last_name)
    return {"success": True, "message": "Profile updated successfully", "data": {"admin": serialize_admin(updated)}}


@router.put("/auth/change-password")
def change_password(payload: dict = Body(...), user: AdminUser = Depends(get_current_admin), db: Session = Depends(get_db)):
    data = validate_payload(ChangePasswordIn, payload)
    SessionService(db).change_password(user, data.current_password, data.new_password)
    return {"success": True, "message": "Password changed successfully"}


@router.get("/auth/health")
def auth_health():
    return {"success": True, "message": "Auth service is healthy"}
