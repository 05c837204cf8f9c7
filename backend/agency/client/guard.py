from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..errors import AgencyError
from .auth_state import AuthStore


logger = logging.getLogger("agency.security")

LOGIN_PATH = "/admin/login"
HOME_PATH = "/admin/dashboard"


class GuardState(str, enum.Enum):
    UNCHECKED = "unchecked"
    CHECKING = "checking"
    AUTHORIZED = "authorized"
    UNAUTHORIZED = "unauthorized"


@dataclass(frozen=True)
class GuardDecision:
    state: GuardState
    redirect_to: Optional[str] = None

    @property
    def render(self) -> bool:
        return self.redirect_to is None


class RouteGuard:
    """Authorization gate for one admin route.

    Protected routes end ``authorized`` (render) or ``unauthorized`` with a
    redirect: to the login page when there is no valid session, to the
    dashboard when the session lacks the route's permission or role. With
    ``require_auth=False`` the route is public and a signed-in visitor is
    sent to the dashboard instead.
    """

    def __init__(
        self,
        store: AuthStore,
        require_auth: bool = True,
        permission: Optional[Tuple[str, str]] = None,
        roles: Iterable[str] = (),
        login_path: str = LOGIN_PATH,
        home_path: str = HOME_PATH,
    ) -> None:
        self.store = store
        self.require_auth = require_auth
        self.permission = permission
        self.roles = tuple(roles)
        self.login_path = login_path
        self.home_path = home_path
        self.state = GuardState.UNCHECKED
        self.transitions: List[GuardState] = [GuardState.UNCHECKED]

    def _move(self, state: GuardState) -> None:
        self.state = state
        self.transitions.append(state)

    def _finish(self, state: GuardState, redirect_to: Optional[str] = None) -> GuardDecision:
        self._move(state)
        return GuardDecision(state, redirect_to)

    def _authenticated(self) -> bool:
        if self.store.state.is_authenticated:
            return True
        if not self.store.storage.read():
            return False
        self._move(GuardState.CHECKING)
        try:
            self.store.verify()
        except AgencyError:
            return False
        return True

    def _permitted(self) -> bool:
        if self.permission and not self.store.has_permission(*self.permission):
            return False
        if self.roles and (self.store.state.user or {}).get("role") not in self.roles:
            return False
        return True

    def resolve(self) -> GuardDecision:
        if not self.require_auth:
            if self._authenticated():
                return self._finish(GuardState.AUTHORIZED, self.home_path)
            return self._finish(GuardState.UNAUTHORIZED)
        if not self._authenticated():
            return self._finish(GuardState.UNAUTHORIZED, self.login_path)
        if not self._permitted():
            user = self.store.state.user or {}
            logger.warning(
                "route denied user_id=%s role=%s permission=%s roles=%s",
                user.get("id"),
                user.get("role"),
                self.permission,
                self.roles,
            )
            return self._finish(GuardState.UNAUTHORIZED, self.home_path)
        return self._finish(GuardState.AUTHORIZED)
