PASSWORD = "secret123"


def test_login_sets_cookie_and_returns_admin(client):
    resp = client.post("/api/auth/login", json={"email": "editor@example.com", "password": PASSWORD})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["admin"]["email"] == "editor@example.com"
    assert body["data"]["admin"]["role"] == "editor"
    assert resp.cookies.get("adminToken") == body["data"]["token"]
    assert resp.headers["cache-control"] == "no-store"


def test_login_failures_use_error_envelope(client):
    resp = client.post("/api/auth/login", json={"email": "editor@example.com", "password": "nope-nope"})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "invalid_credentials", "message": "Invalid email or password"}

    resp = client.post("/api/auth/login", json={"email": "gone@example.com", "password": PASSWORD})
    assert resp.status_code == 401
    assert resp.json()["error"] == "account_inactive"

    resp = client.post("/api/auth/login", json={})
    assert resp.status_code == 400
    assert set(resp.json()["errors"]) == {"email", "password"}


def test_verify_token_from_body_header_and_cookie(client, token_for, auth_headers):
    resp = client.post("/api/auth/verify-token", json={"token": token_for("admin")})
    assert resp.status_code == 200
    assert resp.json()["data"]["valid"] is True

    resp = client.post("/api/auth/verify-token", headers=auth_headers("editor"))
    assert resp.json()["data"]["admin"]["role"] == "editor"

    client.post("/api/auth/login", json={"email": "root@example.com", "password": PASSWORD})
    resp = client.post("/api/auth/verify-token")
    assert resp.json()["data"]["admin"]["role"] == "super_admin"


def test_verify_token_rejects_bad_token(client):
    resp = client.post("/api/auth/verify-token", json={"token": "not-a-token"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "token_invalid"


def test_me_requires_token(client, auth_headers):
    assert client.get("/api/auth/me").status_code == 401
    resp = client.get("/api/auth/me", headers=auth_headers("admin"))
    assert resp.status_code == 200
    assert resp.json()["data"]["admin"]["fullName"] == "Ada Admin"


def test_profile_and_password_change(client, auth_headers):
    headers = auth_headers("admin")
    resp = client.put("/api/auth/profile", json={"firstName": "Adele"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["admin"]["firstName"] == "Adele"

    resp = client.put("/api/auth/profile", json={}, headers=headers)
    assert resp.status_code == 400

    resp = client.put(
        "/api/auth/change-password",
        json={"currentPassword": PASSWORD, "newPassword": "brand-new-1"},
        headers=headers,
    )
    assert resp.status_code == 200
    resp = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "brand-new-1"})
    assert resp.status_code == 200


def test_logout_clears_cookie(client):
    client.post("/api/auth/login", json={"email": "editor@example.com", "password": PASSWORD})
    resp = client.post("/api/auth/logout")
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert "adminToken" not in client.cookies


def test_health_endpoints(client):
    assert client.get("/api/auth/health").json()["success"] is True
    assert client.get("/health").json()["status"] == "ok"
