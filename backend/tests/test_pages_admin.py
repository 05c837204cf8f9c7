from backend.agency.config import settings
from backend.agency.services.auth_service import SessionService
from backend.agency.services.blog_service import BlogService
from backend.agency.services.company_service import CompanyService
from backend.agency.services.projects_service import ProjectsService


PASSWORD = "secret123"


def _login(client, email):
    return client.post("/admin/login", data={"email": email, "password": PASSWORD}, follow_redirects=False)


def test_home_page_renders_company_name(client, session_factory):
    db = session_factory()
    try:
        CompanyService(db).upsert("company_name", "Northwind Digital")
        ProjectsService(db).create(
            {"title": "Shop Rebuild", "description": "New storefront.", "status": "published", "featured": True}
        )
    finally:
        db.close()
    resp = client.get("/")
    assert resp.status_code == 200
    assert "Northwind Digital" in resp.text
    assert "Shop Rebuild" in resp.text
    assert client.get("/projects/shop-rebuild").status_code == 200


def test_unknown_or_draft_project_page_is_404(client, session_factory):
    db = session_factory()
    try:
        ProjectsService(db).create({"title": "Hidden", "description": "Draft work."})
    finally:
        db.close()
    assert client.get("/projects/hidden").status_code == 404
    assert client.get("/projects/missing").status_code == 404


def test_contact_form_shows_field_errors(client):
    resp = client.post("/contact", data={"name": "J", "email": "bad", "message": "short"})
    assert resp.status_code == 400
    assert "field-error" in resp.text

    resp = client.post(
        "/contact",
        data={"name": "Jane", "email": "jane@example.com", "message": "Please call me about a project."},
    )
    assert resp.status_code == 200
    assert "Thank you for your message" in resp.text


def test_admin_redirects_to_login_without_session(client):
    resp = client.get("/admin/dashboard", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/admin/login"
    assert client.get("/admin", follow_redirects=False).headers["location"] == "/admin/dashboard"


def test_admin_login_sets_both_cookies_and_renders_dashboard(client):
    resp = _login(client, "editor@example.com")
    assert resp.status_code == 303
    assert resp.headers["location"] == "/admin/dashboard"
    assert client.cookies.get("adminToken") == client.cookies.get("authToken")

    page = client.get("/admin/dashboard")
    assert page.status_code == 200
    assert "Welcome, Eddie" in page.text
    assert 'href="/admin/contacts"' in page.text

    # already signed in: the login page bounces to the dashboard
    assert client.get("/admin/login", follow_redirects=False).headers["location"] == "/admin/dashboard"


def test_admin_login_failure_rerenders_form(client):
    resp = client.post("/admin/login", data={"email": "editor@example.com", "password": "wrong-one"})
    assert resp.status_code == 401
    assert "Invalid email or password" in resp.text
    assert "adminToken" not in client.cookies


def test_admin_navigation_and_guard_follow_permissions(client, session_factory):
    db = session_factory()
    try:
        SessionService(db).create_admin(
            "limited@example.com",
            PASSWORD,
            "Lim",
            "Ited",
            role="editor",
            permissions={"contacts": {"read": False}},
        )
    finally:
        db.close()
    _login(client, "limited@example.com")
    page = client.get("/admin/dashboard")
    assert 'href="/admin/projects"' in page.text
    assert 'href="/admin/contacts"' not in page.text

    resp = client.get("/admin/contacts", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/admin/dashboard"


def test_admin_delete_needs_delete_permission(client, session_factory):
    db = session_factory()
    try:
        project = ProjectsService(db).create({"title": "Keep Me", "description": "Stays.", "status": "published"})
        project_id = project.id
    finally:
        db.close()

    _login(client, "editor@example.com")
    page = client.post(f"/admin/projects/{project_id}/delete")
    assert "You do not have permission to delete this item" in page.text
    assert client.get("/api/projects/keep-me").status_code == 200

    client.get("/admin/logout")
    _login(client, "admin@example.com")
    page = client.post(f"/admin/projects/{project_id}/delete")
    assert "Item deleted" in page.text
    assert client.get("/api/projects", params={"status": "all"}).json()["total"] == 0


def test_sitemap_lists_public_pages_only(client, session_factory, monkeypatch):
    monkeypatch.setattr(settings, "SITE_URL", "https://agency.test/")
    db = session_factory()
    try:
        ProjectsService(db).create({"title": "Shop Rebuild", "description": "New storefront.", "status": "published"})
        ProjectsService(db).create({"title": "Secret Pitch", "description": "Not yet.", "status": "draft"})
        BlogService(db).create({"title": "Launch Notes", "content": "text", "status": "published"})
    finally:
        db.close()
    resp = client.get("/sitemap.xml")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/xml")
    assert "<loc>https://agency.test/</loc>" in resp.text
    assert "<loc>https://agency.test/projects/shop-rebuild</loc>" in resp.text
    assert "<loc>https://agency.test/blog/launch-notes</loc>" in resp.text
    assert "secret-pitch" not in resp.text


def test_robots_points_at_sitemap(client, monkeypatch):
    monkeypatch.setattr(settings, "SITE_URL", "https://agency.test")
    resp = client.get("/robots.txt")
    assert resp.status_code == 200
    assert "Disallow: /admin/" in resp.text
    assert "Sitemap: https://agency.test/sitemap.xml" in resp.text
