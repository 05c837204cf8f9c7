from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from ..auth import optional_admin, require_permission
from ..db import get_db
from ..errors import ValidationError
from ..models import AdminUser
from ..services.company_service import CACHE_TAG, CompanyService
from ..services.permissions import has_permission
from ..utils.redis_cache import cached_json


router = APIRouter()


def _include_private(user: AdminUser | None) -> bool:
    return user is not None and has_permission(user, "settings", "read")


@router.get("/company")
def company_info(user: AdminUser | None = Depends(optional_admin), db: Session = Depends(get_db)):
    service = CompanyService(db)
    if _include_private(user):
        return {"success": True, "data": service.content_map(include_private=True), "entries": service.entries(True)}

    def produce():
        return {"success": True, "data": service.content_map(), "entries": service.entries()}

    return cached_json(CACHE_TAG, "public", None, produce)


@router.get("/company/{key}")
def company_entry(key: str, user: AdminUser | None = Depends(optional_admin), db: Session = Depends(get_db)):
    service = CompanyService(db)
    entry = service.get(key, include_private=_include_private(user))
    return {"success": True, "data": service.serialize(entry)}


@router.put("/company")
def update_company(
    payload: dict = Body(...),
    user: AdminUser = Depends(require_permission("settings", "write")),
    db: Session = Depends(get_db),
):
    if not payload:
        raise ValidationError({"__root__": "At least one key is required"})
    service = CompanyService(db)
    saved = service.upsert_bulk(payload)
    return {"success": True, "message": "Company info updated", "entries": [service.serialize(e) for e in saved]}
