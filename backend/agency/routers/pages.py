from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..errors import NotFound, ValidationError
from ..ratelimit import CONTACT_LIMIT_MESSAGE, contact_limit, limiter
from ..services.blog_service import BlogService
from ..services.company_service import CompanyService
from ..services.contact_service import ContactService
from ..services.offerings_service import OfferingsService
from ..services.projects_service import ProjectsService
from ..services.team_service import TeamService
from .contact import request_meta


router = APIRouter()


def _render(request: Request, db: Session, template: str, extra: Optional[Dict[str, Any]] = None, status_code: int = 200):
    templates = request.app.state.templates
    context = {"request": request, "company": CompanyService(db).content_map()}
    context.update(extra or {})
    return templates.TemplateResponse(template, context, status_code=status_code)


def _not_found(request: Request, db: Session, message: str):
    return _render(request, db, "error.html", {"message": message}, status_code=404)


@router.get("/")
def home(request: Request, db: Session = Depends(get_db)):
    projects = ProjectsService(db).list({"featured": "true"}, page=1, limit=6).items
    if not projects:
        projects = ProjectsService(db).list({}, page=1, limit=6).items
    return _render(
        request,
        db,
        "home.html",
        {
            "projects": projects,
            "services": OfferingsService(db).featured(limit=6),
            "posts": BlogService(db).list({}, page=1, limit=3).items,
        },
    )


@router.get("/about")
def about(request: Request, db: Session = Depends(get_db)):
    team = TeamService(db).list({"featured": "true"}, page=1, limit=8).items
    return _render(request, db, "about.html", {"team": team})


@router.get("/projects")
def projects_page(
    request: Request,
    page: int = Query(1, ge=1),
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    result = ProjectsService(db).list({"category": category, "search": search}, page=page, limit=9)
    return _render(
        request,
        db,
        "projects/list.html",
        {"result": result, "category": category or "", "search": search or ""},
    )


@router.get("/projects/{slug}")
def project_detail(slug: str, request: Request, db: Session = Depends(get_db)):
    try:
        project = ProjectsService(db).get(slug, public=True, track_view=True)
    except NotFound:
        return _not_found(request, db, "Project not found")
    return _render(request, db, "projects/detail.html", {"project": project})


@router.get("/services")
def services_page(request: Request, db: Session = Depends(get_db)):
    result = OfferingsService(db).list({}, page=1, limit=50)
    return _render(request, db, "services.html", {"services": result.items})


@router.get("/blog")
def blog_page(
    request: Request,
    page: int = Query(1, ge=1),
    category: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    service = BlogService(db)
    result = service.list({"category": category}, page=page, limit=9)
    return _render(
        request,
        db,
        "blog/list.html",
        {"result": result, "categories": service.categories(), "category": category or ""},
    )


@router.get("/blog/{slug}")
def blog_detail(slug: str, request: Request, db: Session = Depends(get_db)):
    service = BlogService(db)
    try:
        post = service.get(slug, public=True, track_view=True)
    except NotFound:
        return _not_found(request, db, "Post not found")
    return _render(request, db, "blog/detail.html", {"post": post, "related": service.related(post)})


@router.get("/team")
def team_page(request: Request, db: Session = Depends(get_db)):
    result = TeamService(db).list({}, page=1, limit=100)
    return _render(request, db, "team.html", {"team": result.items})


@router.get("/contact")
def contact_page(request: Request, db: Session = Depends(get_db)):
    return _render(request, db, "contact.html", {"status": None, "errors": {}, "form": {}})


@router.post("/contact")
@limiter.shared_limit(contact_limit, scope="contact", error_message=CONTACT_LIMIT_MESSAGE)
def contact_submit(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    company: str = Form(""),
    subject: str = Form(""),
    message: str = Form(""),
    service_interest: str = Form(""),
    db: Session = Depends(get_db),
):
    form = {
        "name": name,
        "email": email,
        "phone": phone or None,
        "company": company or None,
        "subject": subject or None,
        "message": message,
        "service_interest": service_interest or None,
    }
    try:
        ContactService(db).submit(form, request_meta(request))
    except ValidationError as exc:
        return _render(
            request,
            db,
            "contact.html",
            {"status": {"success": False, "message": exc.message}, "errors": exc.fields, "form": form},
            status_code=400,
        )
    status = {"success": True, "message": "Thank you for your message! We will get back to you soon."}
    return _render(request, db, "contact.html", {"status": status, "errors": {}, "form": {}})


STATIC_PAGES = (
    ("/", "weekly", "1.0"),
    ("/about", "monthly", "0.8"),
    ("/services", "monthly", "0.9"),
    ("/projects", "weekly", "0.9"),
    ("/blog", "daily", "0.8"),
    ("/team", "monthly", "0.6"),
    ("/contact", "yearly", "0.7"),
)


@router.get("/sitemap.xml", include_in_schema=False)
def sitemap(request: Request, db: Session = Depends(get_db)):
    services = OfferingsService(db).published()
    latest_service = max((s.updated_at for s in services), default=None)
    entries = [
        {"path": path, "changefreq": freq, "priority": priority, "lastmod": latest_service if path == "/services" else None}
        for path, freq, priority in STATIC_PAGES
    ]
    entries += [
        {"path": f"/projects/{p.slug}", "changefreq": "monthly", "priority": "0.7", "lastmod": p.updated_at}
        for p in ProjectsService(db).published()
    ]
    entries += [
        {"path": f"/blog/{p.slug}", "changefreq": "monthly", "priority": "0.6", "lastmod": p.updated_at}
        for p in BlogService(db).published()
    ]
    templates = request.app.state.templates
    response = templates.TemplateResponse(
        "sitemap.xml",
        {"request": request, "entries": entries, "site_url": settings.SITE_URL.rstrip("/")},
        media_type="application/xml",
    )
    response.headers["Cache-Control"] = "public, max-age=3600"
    return response


@router.get("/robots.txt", include_in_schema=False)
def robots():
    site_url = settings.SITE_URL.rstrip("/")
    lines = [
        "User-agent: *",
        "Allow: /",
        "Disallow: /admin/",
        "Disallow: /api/",
        "",
        f"Sitemap: {site_url}/sitemap.xml",
    ]
    return PlainTextResponse("\n".join(lines) + "\n", headers={"Cache-Control": "public, max-age=86400"})
