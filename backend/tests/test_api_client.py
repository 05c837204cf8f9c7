import json

import httpx
import pytest

from backend.agency.client.api import ContentApi
from backend.agency.client.http import ApiClient, error_from_response
from backend.agency.client.storage import MemoryStorage, TokenStorage
from backend.agency.errors import (
    AccountLocked,
    InvalidCredentials,
    NetworkError,
    NotFound,
    TokenExpired,
    TokenInvalid,
    ValidationError,
)


def _client(handler, storage=None, retries=0, **kwargs):
    return ApiClient(
        base_url="http://api.test/api",
        storage=storage or TokenStorage(MemoryStorage()),
        retries=retries,
        retry_wait=0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_bearer_token_attached_from_storage():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("authorization")
        seen["path"] = request.url.path
        seen["query"] = dict(request.url.params)
        return httpx.Response(200, json={"success": True, "projects": []})

    storage = TokenStorage(MemoryStorage({"authToken": "legacy-token"}))
    with _client(handler, storage) as client:
        client.get("/projects", {"page": 2, "category": None})
    assert seen == {"auth": "Bearer legacy-token", "path": "/api/projects", "query": {"page": "2"}}


def test_unauthorized_clears_every_token_key_and_redirects():
    backend = MemoryStorage({"adminToken": "t", "authToken": "t", "apiKey": "k"})
    redirects = []

    def handler(request):
        return httpx.Response(401, json={"success": False, "error": "token_expired", "message": "Access denied. Token expired."})

    client = _client(handler, TokenStorage(backend), on_unauthorized=redirects.append)
    with pytest.raises(TokenExpired):
        client.get("/projects")
    assert backend.data == {}
    assert client.redirect_to == "/admin/login"
    assert redirects == ["/admin/login"]


def test_failed_login_does_not_redirect():
    def handler(request):
        return httpx.Response(401, json={"success": False, "error": "invalid_credentials", "message": "Invalid email or password"})

    client = _client(handler)
    with pytest.raises(InvalidCredentials):
        client.post("/auth/login", {"email": "a@b.c", "password": "x"})
    assert client.redirect_to is None


def test_transport_errors_are_retried_then_reported():
    attempts = []

    def handler(request):
        attempts.append(1)
        if len(attempts) < 2:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200, json={"success": True, "data": {"ok": True}})

    assert _client(handler, retries=1).get("/company")["data"] == {"ok": True}
    assert len(attempts) == 2

    def always_down(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(NetworkError):
        _client(always_down, retries=2).get("/company")


def test_error_from_response_mapping():
    err = error_from_response(400, {"error": "validation_error", "message": "Validation failed", "errors": {"title": "required"}})
    assert isinstance(err, ValidationError)
    assert err.fields == {"title": "required"}
    assert isinstance(error_from_response(404, {"message": "Project not found"}), NotFound)
    assert isinstance(error_from_response(423, None), AccountLocked)
    assert isinstance(error_from_response(401, "oops"), TokenInvalid)
    generic = error_from_response(502, {})
    assert generic.status_code == 502


def test_content_api_caches_reads_and_invalidates_on_write():
    calls = []

    def handler(request):
        calls.append((request.method, request.url.path))
        if request.method == "GET":
            return httpx.Response(200, json={"success": True, "data": [{"id": 1}], "total": 1})
        return httpx.Response(201, json={"success": True, "data": json.loads(request.content)})

    api = ContentApi(_client(handler))
    first = api.get_projects(page=1)
    assert first == {"projects": [{"id": 1}], "total": 1}
    api.get_projects(page=1)
    assert calls.count(("GET", "/api/projects")) == 1

    created = api.create_project({"title": "New"})
    assert created == {"title": "New"}
    api.get_projects(page=1)
    assert calls.count(("GET", "/api/projects")) == 2
