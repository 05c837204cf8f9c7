from backend.agency.services.company_service import CompanyService


def _project(**overrides):
    data = {
        "title": "Retail Analytics",
        "description": "Dashboards for store managers.",
        "technologies": ["Python", "React"],
        "category": "web_application",
        "status": "published",
    }
    data.update(overrides)
    return data


def _create(client, headers, path, payload):
    resp = client.post(path, json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def test_public_projects_list_only_published(client, auth_headers):
    headers = auth_headers("admin")
    _create(client, headers, "/api/projects", _project(title="Live One"))
    _create(client, headers, "/api/projects", _project(title="Draft One", status="draft"))

    body = client.get("/api/projects").json()
    assert body["success"] is True
    assert [p["title"] for p in body["projects"]] == ["Live One"]
    assert body["total"] == 1
    assert body["pagination"]["currentPage"] == 1

    admin_all = client.get("/api/projects", params={"status": "all"}, headers=headers).json()
    assert admin_all["total"] == 2
    admin_default = client.get("/api/projects", headers=headers).json()
    assert admin_default["total"] == 1
    drafts = client.get("/api/projects", params={"status": "draft"}, headers=headers).json()
    assert [p["title"] for p in drafts["projects"]] == ["Draft One"]


def test_draft_project_hidden_from_public_detail(client, auth_headers):
    headers = auth_headers("editor")
    draft = _create(client, headers, "/api/projects", _project(title="Secret", status="draft"))
    resp = client.get(f"/api/projects/{draft['slug']}")
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"
    assert client.get(f"/api/projects/{draft['id']}", headers=headers).status_code == 200


def test_create_requires_token_and_permission(client, auth_headers):
    resp = client.post("/api/projects", json=_project())
    assert resp.status_code == 401
    resp = client.delete("/api/team/1", headers=auth_headers("editor"))
    assert resp.status_code == 403
    assert resp.json()["error"] == "permission_denied"


def test_validation_errors_are_reported_per_field(client, auth_headers):
    resp = client.post(
        "/api/projects",
        json={"title": "", "category": "spaceship"},
        headers=auth_headers("admin"),
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "validation_error"
    assert {"title", "description", "category"} <= set(body["errors"])


def test_pagination_bounds(client):
    assert client.get("/api/projects", params={"limit": 101}).status_code == 400
    resp = client.get("/api/projects", params={"page": 0})
    assert resp.status_code == 400
    assert "page" in resp.json()["errors"]


def test_pagination_meta(client, auth_headers):
    headers = auth_headers("admin")
    for n in range(5):
        _create(client, headers, "/api/projects", _project(title=f"Project {n}"))
    body = client.get("/api/projects", params={"page": 2, "limit": 2}).json()
    assert len(body["projects"]) == 2
    assert body["pagination"] == {
        "currentPage": 2,
        "totalPages": 3,
        "total": 5,
        "perPage": 2,
        "hasNext": True,
        "hasPrev": True,
    }


def test_slug_generated_and_deduplicated(client, auth_headers):
    headers = auth_headers("admin")
    first = _create(client, headers, "/api/projects", _project(title="Hello World!"))
    second = _create(client, headers, "/api/projects", _project(title="Hello  world"))
    assert first["slug"] == "hello-world"
    assert second["slug"] == "hello-world-1"
    assert first["seo_title"] == "Hello World!"


def test_featured_projects_listed_first(client, auth_headers):
    headers = auth_headers("admin")
    _create(client, headers, "/api/projects", _project(title="Featured", featured=True))
    _create(client, headers, "/api/projects", _project(title="Newer"))
    titles = [p["title"] for p in client.get("/api/projects").json()["projects"]]
    assert titles == ["Featured", "Newer"]


def test_public_detail_counts_views(client, auth_headers):
    headers = auth_headers("admin")
    project = _create(client, headers, "/api/projects", _project(title="Viewed"))
    client.get(f"/api/projects/{project['slug']}")
    resp = client.get(f"/api/projects/{project['slug']}")
    assert resp.json()["data"]["view_count"] == 2


def test_update_merges_partial_payload(client, auth_headers):
    headers = auth_headers("admin")
    project = _create(client, headers, "/api/projects", _project(title="Before", seo_title="Custom SEO"))
    resp = client.put(f"/api/projects/{project['id']}", json={"title": "After"}, headers=headers)
    data = resp.json()["data"]
    assert data["title"] == "After"
    assert data["description"] == "Dashboards for store managers."
    assert data["slug"] == project["slug"]
    assert data["seo_title"] == "Custom SEO"

    resp = client.put(f"/api/projects/{project['id']}", json={"category": "nope"}, headers=headers)
    assert resp.status_code == 400


def test_delete_project(client, auth_headers):
    headers = auth_headers("admin")
    project = _create(client, headers, "/api/projects", _project())
    assert client.delete(f"/api/projects/{project['id']}", headers=headers).json()["success"] is True
    assert client.delete(f"/api/projects/{project['id']}", headers=headers).status_code == 404


def test_blog_visibility_reading_time_and_related(client, auth_headers):
    headers = auth_headers("editor")
    words = " ".join(["word"] * 450)
    post = _create(
        client,
        headers,
        "/api/blog",
        {"title": "Shipping Fast", "content": f"<p>{words}</p>", "status": "published", "category": "process"},
    )
    assert post["word_count"] == 450
    assert post["reading_time"] == 3
    assert post["published_at"] is not None
    _create(client, headers, "/api/blog", {"title": "Another", "content": "text", "status": "published", "category": "process"})
    _create(client, headers, "/api/blog", {"title": "Future", "content": "text", "status": "published", "published_at": "2999-01-01T00:00:00"})
    _create(client, headers, "/api/blog", {"title": "Draft", "content": "text"})

    body = client.get("/api/blog").json()
    assert sorted(p["title"] for p in body["posts"]) == ["Another", "Shipping Fast"]

    detail = client.get("/api/blog/slug/shipping-fast").json()
    assert detail["data"]["title"] == "Shipping Fast"
    assert [p["title"] for p in detail["related"]] == ["Another"]

    categories = client.get("/api/blog/categories").json()["data"]
    assert categories == [{"category": "process", "count": 2}]


def test_team_active_filter(client, auth_headers):
    headers = auth_headers("admin")
    _create(client, headers, "/api/team", {"name": "Alex Morgan", "position": "CTO", "is_featured": True})
    _create(client, headers, "/api/team", {"name": "Past Member", "position": "Designer", "is_active": False})

    public = client.get("/api/team").json()
    assert [m["name"] for m in public["teamMembers"]] == ["Alex Morgan"]
    assert public["teamMembers"][0]["social_links"]["github"] == ""

    everyone = client.get("/api/team", params={"is_active": "all"}, headers=headers).json()
    assert everyone["total"] == 2
    inactive = client.get("/api/team", params={"is_active": "false"}, headers=headers).json()
    assert [m["name"] for m in inactive["teamMembers"]] == ["Past Member"]


def test_services_featured_and_inactive(client, auth_headers):
    headers = auth_headers("admin")
    base = {"short_description": "Short", "description": "Long", "category": "web_development"}
    _create(client, headers, "/api/services", {**base, "name": "Web", "is_featured": True, "price_currency": "eur"})
    _create(client, headers, "/api/services", {**base, "name": "Legacy", "is_active": False, "is_featured": True})

    featured = client.get("/api/services/featured").json()["services"]
    assert [s["name"] for s in featured] == ["Web"]
    assert featured[0]["price_currency"] == "EUR"
    assert client.get("/api/services/legacy").status_code == 404
    assert client.get("/api/services/legacy", headers=headers).status_code == 200


def test_team_ordered_featured_then_display_order_then_created(client, auth_headers):
    headers = auth_headers("admin")
    for name, order, featured in (
        ("Aye One", 2, False),
        ("Bee Two", 5, True),
        ("Cee Three", 2, False),
        ("Dee Four", 1, True),
    ):
        _create(client, headers, "/api/team", {"name": name, "position": "Engineer", "display_order": order, "is_featured": featured})
    names = [m["name"] for m in client.get("/api/team").json()["teamMembers"]]
    assert names == ["Dee Four", "Bee Two", "Aye One", "Cee Three"]


def test_services_ordered_featured_then_display_order(client, auth_headers):
    headers = auth_headers("admin")
    base = {"short_description": "Short", "description": "Long", "category": "web_development"}
    for name, order, featured in (
        ("Audit", 3, False),
        ("Build", 2, True),
        ("Consult", 1, False),
        ("Design", 0, True),
    ):
        _create(client, headers, "/api/services", {**base, "name": name, "display_order": order, "is_featured": featured})
    names = [s["name"] for s in client.get("/api/services").json()["services"]]
    assert names == ["Design", "Build", "Consult", "Audit"]


def test_blog_ordered_by_publication_date(client, auth_headers):
    headers = auth_headers("editor")
    for title, published, featured in (
        ("Oldest", "2020-03-01T09:00:00", True),
        ("Newest", "2024-03-01T09:00:00", False),
        ("Middle", "2022-03-01T09:00:00", False),
    ):
        _create(
            client,
            headers,
            "/api/blog",
            {"title": title, "content": "text", "status": "published", "published_at": published, "featured": featured},
        )
    titles = [p["title"] for p in client.get("/api/blog").json()["posts"]]
    assert titles == ["Newest", "Middle", "Oldest"]


def test_blog_author_filter_and_default_author(client, auth_headers, db):
    headers = auth_headers("editor")
    unsigned = _create(client, headers, "/api/blog", {"title": "Unsigned", "content": "text", "status": "published"})
    assert unsigned["author_name"] == "Editorial Team"

    CompanyService(db).upsert("company_name", "Northwind Digital")
    branded = _create(client, headers, "/api/blog", {"title": "Branded", "content": "text", "status": "published"})
    assert branded["author_name"] == "Northwind Digital Team"

    _create(
        client,
        headers,
        "/api/blog",
        {"title": "Signed", "content": "text", "status": "published", "author_name": "Maria Lopez"},
    )
    titles = [p["title"] for p in client.get("/api/blog", params={"author": "lopez"}).json()["posts"]]
    assert titles == ["Signed"]
    titles = sorted(p["title"] for p in client.get("/api/blog", params={"author": "team"}).json()["posts"])
    assert titles == ["Branded", "Unsigned"]
