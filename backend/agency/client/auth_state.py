from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..errors import AgencyError, TokenInvalid
from ..services.auth_service import SessionService, serialize_admin
from ..services.permissions import has_permission
from .http import ApiClient
from .storage import TokenStorage


logger = logging.getLogger(__name__)


class HttpAuthGateway:
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self.client.post("/auth/login", {"email": email, "password": password})["data"]
        return {"admin": data["admin"], "token": data["token"]}

    def verify(self, token: str) -> Dict[str, Any]:
        return {"admin": self.client.post("/auth/verify-token", {"token": token})["data"]["admin"]}

    def me(self, token: str) -> Dict[str, Any]:
        return {"admin": self.client.get("/auth/me")["data"]["admin"]}

    def logout(self, token: str | None) -> None:
        self.client.post("/auth/logout")

    def update_profile(self, token: str, first_name: str | None, last_name: str | None) -> Dict[str, Any]:
        body = self.client.put("/auth/profile", {"firstName": first_name, "lastName": last_name})
        return {"admin": body["data"]["admin"]}

    def change_password(self, token: str, current_password: str, new_password: str) -> None:
        self.client.put("/auth/change-password", {"currentPassword": current_password, "newPassword": new_password})


class LocalAuthGateway:
    """Same contract as the HTTP gateway, served by the in-process session service."""

    def __init__(self, db: Session, service: SessionService | None = None) -> None:
        self.service = service or SessionService(db)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        result = self.service.login(email, password)
        return {"admin": serialize_admin(result["user"]), "token": result["token"]}

    def verify(self, token: str) -> Dict[str, Any]:
        return {"admin": serialize_admin(self.service.verify(token)["user"])}

    def me(self, token: str) -> Dict[str, Any]:
        return self.verify(token)

    def logout(self, token: str | None) -> None:
        self.service.logout(token)

    def update_profile(self, token: str, first_name: str | None, last_name: str | None) -> Dict[str, Any]:
        user = self.service.verify(token)["user"]
        return {"admin": serialize_admin(self.service.update_profile(user, first_name, last_name))}

    def change_password(self, token: str, current_password: str, new_password: str) -> None:
        user = self.service.verify(token)["user"]
        self.service.change_password(user, current_password, new_password)


@dataclass
class AuthState:
    user: Optional[Dict[str, Any]] = None
    token: Optional[str] = None
    permissions: Dict[str, Dict[str, bool]] = field(default_factory=dict)
    is_authenticated: bool = False
    loading: bool = False
    error: Optional[str] = None


class AuthStore:
    def __init__(self, gateway, storage: TokenStorage | None = None) -> None:
        self.gateway = gateway
        self.storage = storage or TokenStorage()
        self.state = AuthState(token=self.storage.read())

    def _authenticate(self, admin: Dict[str, Any], token: str) -> None:
        self.state = AuthState(
            user=admin,
            token=token,
            permissions=dict(admin.get("permissions") or {}),
            is_authenticated=True,
        )

    def _reset(self, error: str | None = None) -> None:
        self.storage.clear()
        self.state = AuthState(error=error)

    def initialize(self) -> bool:
        """Verify a stored token, if any. Failures leave the store signed out."""
        if not self.storage.read():
            return False
        try:
            self.verify()
        except AgencyError as exc:
            logger.info("stored token rejected: %s", exc.code)
            return False
        return True

    def login(self, email: str, password: str) -> Dict[str, Any]:
        self.state.loading = True
        self.state.error = None
        try:
            result = self.gateway.login(email, password)
        except AgencyError as exc:
            self.state.loading = False
            self.state.error = exc.message
            raise
        self.storage.write(result["token"])
        self._authenticate(result["admin"], result["token"])
        return result["admin"]

    def verify(self, token: str | None = None) -> Dict[str, Any]:
        token = token or self.storage.read()
        if not token:
            self._reset()
            raise TokenInvalid("Access denied. No token provided.")
        self.state.loading = True
        try:
            admin = self.gateway.verify(token)["admin"]
        except AgencyError as exc:
            self._reset(exc.message)
            raise
        self.storage.write(token)
        self._authenticate(admin, token)
        return admin

    def logout(self) -> None:
        token = self.state.token or self.storage.read()
        try:
            self.gateway.logout(token)
        except AgencyError as exc:
            logger.warning("logout call failed, clearing local session anyway: %s", exc.code)
        self._reset()

    def refresh_user(self) -> Dict[str, Any]:
        token = self.state.token or self.storage.read()
        try:
            admin = self.gateway.me(token or "")["admin"]
        except AgencyError as exc:
            if exc.status_code == 401:
                self._reset(exc.message)
            raise
        self._authenticate(admin, token)
        return admin

    def update_profile(self, first_name: str | None = None, last_name: str | None = None) -> Dict[str, Any]:
        try:
            admin = self.gateway.update_profile(self.state.token or "", first_name, last_name)["admin"]
        except AgencyError as exc:
            self.state.error = exc.message
            raise
        self._authenticate(admin, self.state.token)
        return admin

    def change_password(self, current_password: str, new_password: str) -> None:
        try:
            self.gateway.change_password(self.state.token or "", current_password, new_password)
        except AgencyError as exc:
            self.state.error = exc.message
            raise
        self.state.error = None

    def has_permission(self, resource: str, action: str) -> bool:
        if not self.state.is_authenticated:
            return False
        return has_permission(self.state.user, resource, action)
