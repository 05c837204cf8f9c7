from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from ..auth import can_read, optional_admin, require_permission
from ..db import get_db
from ..models import AdminUser
from ..services.team_service import TeamService
from ..utils.redis_cache import cached_json


router = APIRouter()


@router.get("/team")
def list_team(
    page: int = Query(1),
    limit: int = Query(20),
    department: Optional[str] = Query(None),
    expertise_level: Optional[str] = Query(None),
    is_active: Optional[str] = Query(None),
    featured: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    user: AdminUser | None = Depends(optional_admin),
    db: Session = Depends(get_db),
):
    service = TeamService(db)
    public = not can_read(user, "team")
    filters = {
        "department": department,
        "expertise_level": expertise_level,
        "featured": featured,
        "search": search,
    }
    if is_active is not None:
        filters["is_active"] = is_active

    def produce():
        result = service.list(filters, page=page, limit=limit, public=public)
        return {"success": True, **result.to_dict(service.collection_key, service.serialize)}

    if public:
        return cached_json("team", "list", {**filters, "page": page, "limit": limit}, produce)
    return produce()


@router.get("/team/stats")
def team_stats(db: Session = Depends(get_db)):
    return {"success": True, "data": TeamService(db).stats()}


@router.get("/team/{id_or_slug}")
def get_member(
    id_or_slug: str,
    user: AdminUser | None = Depends(optional_admin),
    db: Session = Depends(get_db),
):
    service = TeamService(db)
    member = service.get(id_or_slug, public=not can_read(user, "team"))
    return {"success": True, "data": service.serialize(member)}


@router.post("/team", status_code=201)
def create_member(
    payload: dict = Body(...),
    user: AdminUser = Depends(require_permission("team", "write")),
    db: Session = Depends(get_db),
):
    service = TeamService(db)
    member = service.create(payload)
    return {"success": True, "message": "Team member created successfully", "data": service.serialize(member)}


@router.put("/team/{member_id}")
def update_member(
    member_id: int,
    payload: dict = Body(...),
    user: AdminUser = Depends(require_permission("team", "write")),
    db: Session = Depends(get_db),
):
    service = TeamService(db)
    member = service.update(member_id, payload)
    return {"success": True, "message": "Team member updated successfully", "data": service.serialize(member)}


@router.delete("/team/{member_id}")
def delete_member(
    member_id: int,
    user: AdminUser = Depends(require_permission("team", "delete")),
    db: Session = Depends(get_db),
):
    TeamService(db).delete(member_id)
    return {"success": True, "message": "Team member deleted successfully"}
