from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .db import get_db
from .errors import AgencyError, PermissionDenied, TokenInvalid
from .models import AdminUser
from .services.auth_service import SessionService
from .services.permissions import has_permission


security_log = logging.getLogger("agency.security")
bearer = HTTPBearer(auto_error=False)

TOKEN_COOKIE = "adminToken"


def extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(TOKEN_COOKIE)


def get_current_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
) -> AdminUser:
    token = extract_token(request, credentials)
    if not token:
        raise TokenInvalid("Access denied. No token provided.")
    user = SessionService(db).verify(token)["user"]
    request.state.user = user
    request.state.token = token
    return user


def optional_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
) -> AdminUser | None:
    token = extract_token(request, credentials)
    if not token:
        request.state.user = None
        return None
    try:
        user = SessionService(db).verify(token)["user"]
    except AgencyError:
        # stale credentials on a public endpoint degrade to anonymous
        request.state.user = None
        return None
    request.state.user = user
    return user


def require_permission(resource: str, action: str):
    def check_permission(user: AdminUser = Depends(get_current_admin)) -> AdminUser:
        if not has_permission(user, resource, action):
            security_log.warning(
                "permission denied user_id=%s role=%s resource=%s action=%s", user.id, user.role, resource, action
            )
            raise PermissionDenied(f"Access denied. Required permission: {resource}.{action}")
        return user

    return check_permission


def can_read(user: AdminUser | None, resource: str) -> bool:
    return user is not None and has_permission(user, resource, "read")
