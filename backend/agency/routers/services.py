from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from ..auth import can_read, optional_admin, require_permission
from ..db import get_db
from ..models import AdminUser
from ..services.offerings_service import OfferingsService
from ..utils.redis_cache import cached_json


router = APIRouter()


@router.get("/services")
def list_services(
    page: int = Query(1),
    limit: int = Query(20),
    category: Optional[str] = Query(None),
    pricing_model: Optional[str] = Query(None),
    is_active: Optional[str] = Query(None),
    featured: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    user: AdminUser | None = Depends(optional_admin),
    db: Session = Depends(get_db),
):
    service = OfferingsService(db)
    public = not can_read(user, "services")
    filters = {"category": category, "pricing_model": pricing_model, "featured": featured, "search": search}
    if is_active is not None:
        filters["is_active"] = is_active

    def produce():
        result = service.list(filters, page=page, limit=limit, public=public)
        return {"success": True, **result.to_dict(service.collection_key, service.serialize)}

    if public:
        return cached_json("services", "list", {**filters, "page": page, "limit": limit}, produce)
    return produce()


@router.get("/services/featured")
def featured_services(limit: int = Query(6, ge=1, le=20), db: Session = Depends(get_db)):
    service = OfferingsService(db)

    def produce():
        return {"success": True, "services": [service.serialize(s) for s in service.featured(limit)]}

    return cached_json("services", "featured", {"limit": limit}, produce)


@router.get("/services/{id_or_slug}")
def get_offering(
    id_or_slug: str,
    user: AdminUser | None = Depends(optional_admin),
    db: Session = Depends(get_db),
):
    service = OfferingsService(db)
    item = service.get(id_or_slug, public=not can_read(user, "services"))
    return {"success": True, "data": service.serialize(item)}


@router.post("/services", status_code=201)
def create_offering(
    payload: dict = Body(...),
    user: AdminUser = Depends(require_permission("services", "write")),
    db: Session = Depends(get_db),
):
    service = OfferingsService(db)
    item = service.create(payload)
    return {"success": True, "message": "Service created successfully", "data": service.serialize(item)}


@router.put("/services/{item_id}")
def update_offering(
    item_id: int,
    payload: dict = Body(...),
    user: AdminUser = Depends(require_permission("services", "write")),
    db: Session = Depends(get_db),
):
    service = OfferingsService(db)
    item = service.update(item_id, payload)
    return {"success": True, "message": "Service updated successfully", "data": service.serialize(item)}


@router.delete("/services/{item_id}")
def delete_offering(
    item_id: int,
    user: AdminUser = Depends(require_permission("services", "delete")),
    db: Session = Depends(get_db),
):
    OfferingsService(db).delete(item_id)
    return {"success": True, "message": "Service deleted successfully"}
