import time

import httpx
import pytest

from backend.agency.client.auth_state import AuthStore, HttpAuthGateway, LocalAuthGateway
from backend.agency.client.http import ApiClient
from backend.agency.client.guard import GuardState, RouteGuard
from backend.agency.client.storage import JsonFileStorage, MemoryStorage, TokenStorage
from backend.agency.errors import InvalidCredentials, TokenExpired, TokenInvalid
from backend.agency.services.auth_service import TokenSigner


PASSWORD = "secret123"


class StubGateway:
    def __init__(self, admin=None, fail_verify=None):
        self.admin = admin or {"id": 1, "email": "a@example.com", "role": "editor", "permissions": {"blog": {"read": True}}}
        self.fail_verify = fail_verify
        self.verified = []

    def login(self, email, password):
        if password != PASSWORD:
            raise InvalidCredentials()
        return {"admin": self.admin, "token": "tok-1"}

    def verify(self, token):
        self.verified.append(token)
        if self.fail_verify:
            raise self.fail_verify
        return {"admin": self.admin}

    def logout(self, token):
        return None


def test_login_writes_both_token_keys():
    backend = MemoryStorage()
    store = AuthStore(StubGateway(), TokenStorage(backend))
    store.login("a@example.com", PASSWORD)
    assert backend.data == {"adminToken": "tok-1", "authToken": "tok-1"}
    assert store.state.is_authenticated
    assert store.has_permission("blog", "read")
    assert not store.has_permission("blog", "write")


def test_failed_login_stores_nothing():
    backend = MemoryStorage()
    store = AuthStore(StubGateway(), TokenStorage(backend))
    with pytest.raises(InvalidCredentials):
        store.login("a@example.com", "wrong")
    assert backend.data == {}
    assert store.state.error == "Invalid email or password"
    assert not store.state.loading


def test_initialize_with_legacy_key_rewrites_both():
    backend = MemoryStorage({"authToken": "old"})
    store = AuthStore(StubGateway(), TokenStorage(backend))
    assert store.initialize() is True
    assert backend.data == {"adminToken": "old", "authToken": "old"}


def test_expired_token_clears_storage():
    backend = MemoryStorage({"adminToken": "old", "authToken": "old"})
    store = AuthStore(StubGateway(fail_verify=TokenExpired()), TokenStorage(backend))
    assert store.initialize() is False
    assert backend.data == {}
    assert not store.state.is_authenticated
    assert store.state.error == "Access denied. Token expired."


def test_initialize_without_token_skips_gateway():
    gateway = StubGateway()
    assert AuthStore(gateway, TokenStorage(MemoryStorage())).initialize() is False
    assert gateway.verified == []


def test_logout_clears_state():
    backend = MemoryStorage()
    store = AuthStore(StubGateway(), TokenStorage(backend))
    store.login("a@example.com", PASSWORD)
    store.logout()
    assert backend.data == {}
    assert store.state.user is None


def test_json_file_storage_persists(tmp_path):
    path = tmp_path / "session.json"
    TokenStorage(JsonFileStorage(path)).write("persisted")
    assert TokenStorage(JsonFileStorage(path)).read() == "persisted"
    path.write_text("{not json", encoding="utf-8")
    assert TokenStorage(JsonFileStorage(path)).read() is None


def test_local_gateway_against_database(db, users):
    store = AuthStore(LocalAuthGateway(db), TokenStorage(MemoryStorage()))
    admin = store.login("editor@example.com", PASSWORD)
    assert admin["role"] == "editor"
    fresh = AuthStore(LocalAuthGateway(db), store.storage)
    assert fresh.initialize() is True
    assert fresh.state.user["email"] == "editor@example.com"
    fresh.update_profile("Edwina", None)
    assert fresh.state.user["firstName"] == "Edwina"


def test_guard_without_token_redirects_to_login():
    gateway = StubGateway()
    guard = RouteGuard(AuthStore(gateway, TokenStorage(MemoryStorage())))
    decision = guard.resolve()
    assert decision.state is GuardState.UNAUTHORIZED
    assert decision.redirect_to == "/admin/login"
    assert not decision.render
    assert guard.transitions == [GuardState.UNCHECKED, GuardState.UNAUTHORIZED]
    assert gateway.verified == []


def test_guard_verifies_stored_token_then_authorizes():
    store = AuthStore(StubGateway(), TokenStorage(MemoryStorage({"adminToken": "tok"})))
    guard = RouteGuard(store, permission=("blog", "read"))
    decision = guard.resolve()
    assert decision.render
    assert guard.transitions == [GuardState.UNCHECKED, GuardState.CHECKING, GuardState.AUTHORIZED]


def test_guard_invalid_token_goes_to_login():
    store = AuthStore(StubGateway(fail_verify=TokenInvalid()), TokenStorage(MemoryStorage({"adminToken": "tok"})))
    decision = RouteGuard(store).resolve()
    assert decision.redirect_to == "/admin/login"


def test_guard_missing_permission_or_role_goes_home():
    store = AuthStore(StubGateway(), TokenStorage(MemoryStorage({"adminToken": "tok"})))
    assert RouteGuard(store, permission=("contacts", "delete")).resolve().redirect_to == "/admin/dashboard"
    assert RouteGuard(store, roles=("super_admin",)).resolve().redirect_to == "/admin/dashboard"


def test_guard_on_login_page_sends_signed_in_users_home():
    signed_in = AuthStore(StubGateway(), TokenStorage(MemoryStorage({"adminToken": "tok"})))
    assert RouteGuard(signed_in, require_auth=False).resolve().redirect_to == "/admin/dashboard"
    anonymous = AuthStore(StubGateway(), TokenStorage(MemoryStorage()))
    assert RouteGuard(anonymous, require_auth=False).resolve().render


def _forwarding_client(test_client, storage):
    def handler(request):
        headers = {k: v for k, v in request.headers.items() if k in ("authorization", "content-type")}
        resp = test_client.request(request.method, request.url.path, content=request.content, headers=headers)
        return httpx.Response(resp.status_code, content=resp.content, headers={"content-type": "application/json"})

    return ApiClient(base_url="http://api.test/api", storage=storage, retries=0, transport=httpx.MockTransport(handler))


def test_http_gateway_login_then_verify_same_identity(client, users):
    backend = MemoryStorage()
    storage = TokenStorage(backend)
    store = AuthStore(HttpAuthGateway(_forwarding_client(client, storage)), storage)
    admin = store.login("editor@example.com", PASSWORD)
    assert backend.data["adminToken"] == backend.data["authToken"]

    again = AuthStore(HttpAuthGateway(_forwarding_client(client, storage)), storage)
    assert again.initialize() is True
    assert again.state.user["id"] == admin["id"]
    assert again.state.permissions == admin["permissions"]


def test_http_gateway_expired_token_clears_storage_and_redirects(client, users, monkeypatch):
    real_time = time.time
    monkeypatch.setattr(time, "time", lambda: real_time() - 48 * 3600)
    stale = TokenSigner().issue(users["editor"])
    monkeypatch.setattr(time, "time", real_time)

    backend = MemoryStorage({"adminToken": stale, "authToken": stale})
    storage = TokenStorage(backend)
    api = _forwarding_client(client, storage)
    store = AuthStore(HttpAuthGateway(api), storage)
    with pytest.raises(TokenExpired):
        store.verify()
    assert backend.data == {}
    assert api.redirect_to == "/admin/login"
