from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from ..auth import can_read, optional_admin, require_permission
from ..db import get_db
from ..models import AdminUser
from ..services.projects_service import ProjectsService
from ..utils.redis_cache import cached_json


router = APIRouter()


@router.get("/projects")
def list_projects(
    page: int = Query(1),
    limit: int = Query(10),
    status: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    technology: Optional[str] = Query(None),
    featured: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    order: Optional[str] = Query(None),
    user: AdminUser | None = Depends(optional_admin),
    db: Session = Depends(get_db),
):
    service = ProjectsService(db)
    public = not can_read(user, "projects")
    filters = {
        "status": status,
        "category": category,
        "technology": technology,
        "featured": featured,
        "search": search,
        "sort": sort,
        "order": order,
    }

    def produce():
        result = service.list(filters, page=page, limit=limit, public=public)
        return {"success": True, **result.to_dict(service.collection_key, service.serialize)}

    if public:
        return cached_json("projects", "list", {**filters, "page": page, "limit": limit}, produce)
    return produce()


@router.get("/projects/stats")
def project_stats(db: Session = Depends(get_db)):
    return {"success": True, "data": ProjectsService(db).stats()}


@router.get("/projects/{id_or_slug}")
def get_project(
    id_or_slug: str,
    user: AdminUser | None = Depends(optional_admin),
    db: Session = Depends(get_db),
):
    service = ProjectsService(db)
    public = not can_read(user, "projects")
    project = service.get(id_or_slug, public=public, track_view=public)
    return {"success": True, "data": service.serialize(project)}


@router.post("/projects", status_code=201)
def create_project(
    payload: dict = Body(...),
    user: AdminUser = Depends(require_permission("projects", "write")),
    db: Session = Depends(get_db),
):
    service = ProjectsService(db)
    project = service.create(payload, author_id=user.id)
    return {"success": True, "message": "Project created successfully", "data": service.serialize(project)}


@router.put("/projects/{project_id}")
def update_project(
    project_id: int,
    payload: dict = Body(...),
    user: AdminUser = Depends(require_permission("projects", "write")),
    db: Session = Depends(get_db),
):
    service = ProjectsService(db)
    project = service.update(project_id, payload)
    return {"success": True, "message": "Project updated successfully", "data": service.serialize(project)}


@router.delete("/projects/{project_id}")
def delete_project(
    project_id: int,
    user: AdminUser = Depends(require_permission("projects", "delete")),
    db: Session = Depends(get_db),
):
    ProjectsService(db).delete(project_id)
    return {"success": True, "message": "Project deleted successfully"}
