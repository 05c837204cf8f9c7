from __future__ import annotations

import os
import hashlib
import hmac
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import (
    AccountInactive,
    AccountLocked,
    InvalidCredentials,
    TokenExpired,
    TokenInvalid,
    ValidationError,
)
from ..models import AdminUser
from .permissions import ROLES, effective_permissions


security_log = logging.getLogger("agency.security")

PASSWORD_MIN_LENGTH = 6
TOKEN_SALT = "agency-admin-token"


def hash_password(password: str, salt: bytes | None = None, iterations: int = 390000) -> str:
    if salt is None:
        salt = os.urandom(16)
    derived = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return f"pbkdf2_sha256${iterations}${salt.hex()}${derived.hex()}"


def verify_password(stored: str, password: str) -> bool:
    try:
        _, iter_str, salt_hex, _hash_hex = stored.split("$", 3)
        iterations = int(iter_str)
        salt = bytes.fromhex(salt_hex)
    except ValueError:
        return False
    candidate = hash_password(password, salt=salt, iterations=iterations)
    return hmac.compare_digest(candidate, stored)


class TokenSigner:
    """Signs and reads stateless admin tokens.

    The payload carries ``id``, ``email`` and ``role``; the signing timestamp
    is embedded by itsdangerous and checked against ``ttl_hours`` on read.
    """

    def __init__(self, secret: str | None = None, ttl_hours: int | None = None) -> None:
        self.serializer = URLSafeTimedSerializer(secret or settings.APP_SECRET, salt=TOKEN_SALT)
        self.ttl_seconds = int((ttl_hours if ttl_hours is not None else settings.TOKEN_TTL_HOURS) * 3600)

    def issue(self, user: AdminUser) -> str:
        return self.serializer.dumps({"id": user.id, "email": user.email, "role": user.role})

    def read(self, token: str) -> Dict[str, Any]:
        if not token:
            raise TokenInvalid("Access denied. No token provided.")
        try:
            data = self.serializer.loads(token, max_age=self.ttl_seconds)
        except SignatureExpired:
            raise TokenExpired()
        except BadSignature:
            raise TokenInvalid()
        if not isinstance(data, dict) or "id" not in data:
            raise TokenInvalid()
        return data


def serialize_admin(user: AdminUser) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "fullName": user.full_name,
        "role": user.role,
        "permissions": effective_permissions(user.role, user.permissions),
        "isActive": user.is_active,
        "profileImage": user.profile_image,
        "lastLogin": user.last_login_at.isoformat() if user.last_login_at else None,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
    }


class SessionService:
    def __init__(self, db: Session, signer: TokenSigner | None = None) -> None:
        self.db = db
        self.signer = signer or TokenSigner()

    def _by_email(self, email: str) -> Optional[AdminUser]:
        email_norm = (email or "").strip().lower()
        return self.db.execute(select(AdminUser).where(AdminUser.email == email_norm)).scalar_one_or_none()

    def _register_failure(self, user: AdminUser, now: datetime) -> None:
        if user.lock_until and user.lock_until <= now:
            # previous lock ran out; start a fresh window
            user.login_attempts = 1
            user.lock_until = None
        else:
            user.login_attempts = (user.login_attempts or 0) + 1
            if user.login_attempts >= settings.LOGIN_MAX_ATTEMPTS and not user.is_locked(now):
                user.lock_until = now + timedelta(minutes=settings.LOGIN_LOCK_MINUTES)
                security_log.warning("account locked email=%s attempts=%s", user.email, user.login_attempts)
        self.db.commit()

    def login(self, email: str, password: str) -> Dict[str, Any]:
        if not email or not password:
            fields = {}
            if not email:
                fields["email"] = "Email is required"
            if not password:
                fields["password"] = "Password is required"
            raise ValidationError(fields, "Email and password are required")
        now = datetime.utcnow()
        user = self._by_email(email)
        if user is None:
            security_log.warning("failed login email=%s reason=unknown", email)
            raise InvalidCredentials()
        if user.is_locked(now):
            security_log.warning("login on locked account email=%s", user.email)
            raise AccountLocked()
        if not user.is_active:
            security_log.warning("login on inactive account email=%s", user.email)
            raise AccountInactive()
        if not verify_password(user.password_hash, password):
            self._register_failure(user, now)
            security_log.warning("failed login email=%s reason=password", user.email)
            raise InvalidCredentials()
        user.login_attempts = 0
        user.lock_until = None
        user.last_login_at = now
        self.db.commit()
        self.db.refresh(user)
        return {"user": user, "token": self.signer.issue(user)}

    def verify(self, token: str) -> Dict[str, Any]:
        claims = self.signer.read(token)
        user = self.db.get(AdminUser, claims["id"])
        if user is None or not user.is_active:
            raise TokenInvalid("Access denied. Invalid token or admin not found.")
        return {"user": user}

    def logout(self, token: str | None = None) -> None:
        # tokens are stateless; nothing to revoke here
        return None

    def me(self, user: AdminUser) -> AdminUser:
        self.db.refresh(user)
        return user

    def update_profile(self, user: AdminUser, first_name: str | None = None, last_name: str | None = None) -> AdminUser:
        first = (first_name or "").strip()
        last = (last_name or "").strip()
        if not first and not last:
            raise ValidationError(
                {"firstName": "First name or last name is required", "lastName": "First name or last name is required"},
                "At least one field (firstName or lastName) is required",
            )
        fields = {}
        if first and not 2 <= len(first) <= 50:
            fields["firstName"] = "First name must be between 2 and 50 characters"
        if last and not 2 <= len(last) <= 50:
            fields["lastName"] = "Last name must be between 2 and 50 characters"
        if fields:
            raise ValidationError(fields)
        if first:
            user.first_name = first
        if last:
            user.last_name = last
        self.db.commit()
        self.db.refresh(user)
        return user

    def change_password(self, user: AdminUser, current_password: str, new_password: str) -> None:
        fields = {}
        if not current_password:
            fields["currentPassword"] = "Current password is required"
        if not new_password:
            fields["newPassword"] = "New password is required"
        elif len(new_password) < PASSWORD_MIN_LENGTH:
            fields["newPassword"] = f"New password must be at least {PASSWORD_MIN_LENGTH} characters long"
        elif current_password and new_password == current_password:
            fields["newPassword"] = "New password must be different from current password"
        if fields:
            raise ValidationError(fields)
        if not verify_password(user.password_hash, current_password):
            security_log.warning("password change with wrong current password user_id=%s", user.id)
            raise InvalidCredentials("Current password is incorrect")
        user.password_hash = hash_password(new_password)
        self.db.commit()

    def create_admin(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: str = "admin",
        permissions: Optional[Dict[str, Dict[str, bool]]] = None,
    ) -> AdminUser:
        fields = {}
        email_norm = (email or "").strip().lower()
        if "@" not in email_norm:
            fields["email"] = "Please provide a valid email address"
        if not password or len(password) < PASSWORD_MIN_LENGTH:
            fields["password"] = f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
        if role not in ROLES:
            fields["role"] = f"Role must be one of: {', '.join(ROLES)}"
        if not (first_name or "").strip():
            fields["firstName"] = "First name is required"
        if not (last_name or "").strip():
            fields["lastName"] = "Last name is required"
        if not fields.get("email") and self._by_email(email_norm) is not None:
            fields["email"] = "Admin with this email already exists"
        if fields:
            raise ValidationError(fields)
        user = AdminUser(
            email=email_norm,
            password_hash=hash_password(password),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            role=role,
            permissions=permissions or {},
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def deactivate(self, user: AdminUser) -> AdminUser:
        user.is_active = False
        self.db.commit()
        self.db.refresh(user)
        return user
