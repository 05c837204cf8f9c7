from typing import Optional

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from ..client.auth_state import AuthStore, LocalAuthGateway
from ..client.guard import RouteGuard
from ..client.storage import CookieStorage, TokenStorage
from ..config import settings
from ..db import get_db
from ..errors import AgencyError
from ..ratelimit import AUTH_LIMIT_MESSAGE, auth_limit, limiter
from ..services.blog_service import BlogService
from ..services.contact_service import ContactService
from ..services.offerings_service import OfferingsService
from ..services.permissions import nav_item_for, visible_navigation
from ..services.projects_service import ProjectsService
from ..services.team_service import TeamService


router = APIRouter()

SECTIONS = {
    "projects": (ProjectsService, "Projects", {"status": "all"}),
    "blog": (BlogService, "Blog posts", {"status": "all"}),
    "team": (TeamService, "Team members", {"is_active": "all"}),
    "services": (OfferingsService, "Services", {"is_active": "all"}),
    "contacts": (ContactService, "Contact submissions", {}),
}


def _session(request: Request, db: Session, path: str, require_auth: bool = True):
    cookies = CookieStorage(request.cookies, max_age=settings.TOKEN_TTL_HOURS * 3600, secure=settings.is_production)
    store = AuthStore(LocalAuthGateway(db), TokenStorage(cookies))
    item = nav_item_for(path)
    permission = (item.resource, item.action) if item and item.resource else None
    decision = RouteGuard(store, require_auth=require_auth, permission=permission).resolve()
    return store, cookies, decision


def _redirect(url: str, cookies: CookieStorage) -> RedirectResponse:
    response = RedirectResponse(url=url, status_code=303)
    cookies.apply(response)
    return response


def _render(request: Request, store: AuthStore, template: str, context: dict, status_code: int = 200):
    templates = request.app.state.templates
    base = {
        "request": request,
        "admin": store.state.user,
        "navigation": visible_navigation(store.state.user),
        "flash": request.session.pop("flash", None),
    }
    base.update(context)
    return templates.TemplateResponse(template, base, status_code=status_code)


@router.get("/admin")
def admin_root():
    return RedirectResponse(url="/admin/dashboard", status_code=302)


@router.get("/admin/login")
def login_page(request: Request, db: Session = Depends(get_db)):
    store, cookies, decision = _session(request, db, "/admin/login", require_auth=False)
    if decision.redirect_to:
        return _redirect(decision.redirect_to, cookies)
    templates = request.app.state.templates
    response = templates.TemplateResponse("admin/login.html", {"request": request, "error": None, "email": ""})
    cookies.apply(response)
    return response


@router.post("/admin/login")
@limiter.shared_limit(auth_limit, scope="auth", error_message=AUTH_LIMIT_MESSAGE)
def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    cookies = CookieStorage(request.cookies, max_age=settings.TOKEN_TTL_HOURS * 3600, secure=settings.is_production)
    store = AuthStore(LocalAuthGateway(db), TokenStorage(cookies))
    try:
        store.login(email, password)
    except AgencyError as exc:
        templates = request.app.state.templates
        return templates.TemplateResponse(
            "admin/login.html",
            {"request": request, "error": exc.message, "email": email},
            status_code=exc.status_code,
        )
    return _redirect("/admin/dashboard", cookies)


@router.get("/admin/logout")
def logout(request: Request, db: Session = Depends(get_db)):
    cookies = CookieStorage(request.cookies)
    AuthStore(LocalAuthGateway(db), TokenStorage(cookies)).logout()
    return _redirect("/admin/login", cookies)


@router.get("/admin/dashboard")
def dashboard(request: Request, db: Session = Depends(get_db)):
    store, cookies, decision = _session(request, db, "/admin/dashboard")
    if decision.redirect_to:
        return _redirect(decision.redirect_to, cookies)
    stats = {}
    if store.has_permission("projects", "read"):
        stats["projects"] = ProjectsService(db).stats()
    if store.has_permission("blog", "read"):
        stats["blog"] = BlogService(db).stats()
    if store.has_permission("team", "read"):
        stats["team"] = TeamService(db).stats()
    if store.has_permission("contacts", "read"):
        stats["contacts"] = ContactService(db).stats()
    response = _render(request, store, "admin/dashboard.html", {"stats": stats})
    cookies.apply(response)
    return response


@router.get("/admin/{section}")
def section_page(
    section: str,
    request: Request,
    page: int = Query(1, ge=1),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    if section not in SECTIONS:
        return RedirectResponse(url="/admin/dashboard", status_code=302)
    store, cookies, decision = _session(request, db, f"/admin/{section}")
    if decision.redirect_to:
        return _redirect(decision.redirect_to, cookies)
    service_cls, title, defaults = SECTIONS[section]
    service = service_cls(db)
    result = service.list({**defaults, "search": search}, page=page, limit=20, public=False)
    response = _render(
        request,
        store,
        "admin/section.html",
        {
            "section": section,
            "title": title,
            "result": result,
            "rows": [service.serialize(item) for item in result.items],
            "search": search or "",
            "can_write": store.has_permission(section, "write"),
            "can_delete": store.has_permission(section, "delete"),
        },
    )
    cookies.apply(response)
    return response


@router.post("/admin/contacts/{submission_id}/status")
def contact_status(
    submission_id: int,
    request: Request,
    status: str = Form(...),
    db: Session = Depends(get_db),
):
    store, cookies, decision = _session(request, db, "/admin/contacts")
    if decision.redirect_to:
        return _redirect(decision.redirect_to, cookies)
    if not store.has_permission("contacts", "write"):
        return _redirect("/admin/contacts", cookies)
    try:
        ContactService(db).update_status(submission_id, {"status": status})
        request.session["flash"] = "Submission status updated"
    except AgencyError as exc:
        request.session["flash"] = exc.message
    return _redirect("/admin/contacts", cookies)


@router.post("/admin/{section}/{item_id}/delete")
def delete_item(section: str, item_id: int, request: Request, db: Session = Depends(get_db)):
    if section not in SECTIONS:
        return RedirectResponse(url="/admin/dashboard", status_code=303)
    store, cookies, decision = _session(request, db, f"/admin/{section}")
    if decision.redirect_to:
        return _redirect(decision.redirect_to, cookies)
    if not store.has_permission(section, "delete"):
        request.session["flash"] = "You do not have permission to delete this item"
        return _redirect(f"/admin/{section}", cookies)
    try:
        SECTIONS[section][0](db).delete(item_id)
        request.session["flash"] = "Item deleted"
    except AgencyError as exc:
        request.session["flash"] = exc.message
    return _redirect(f"/admin/{section}", cookies)
