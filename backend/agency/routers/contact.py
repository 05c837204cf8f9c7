from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.orm import Session

from ..auth import require_permission
from ..db import get_db
from ..models import AdminUser
from ..ratelimit import CONTACT_LIMIT_MESSAGE, NEWSLETTER_LIMIT_MESSAGE, contact_limit, limiter, newsletter_limit
from ..services.contact_service import ContactService


router = APIRouter()


def request_meta(request: Request) -> dict:
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
        "referrer": request.headers.get("referer"),
    }


@router.post("/contact", status_code=201)
@limiter.shared_limit(contact_limit, scope="contact", error_message=CONTACT_LIMIT_MESSAGE)
def submit_contact(request: Request, payload: dict = Body(...), db: Session = Depends(get_db)):
    item = ContactService(db).submit(payload, request_meta(request))
    return {
        "success": True,
        "message": "Thank you for your message! We will get back to you soon.",
        "data": {"id": item.id, "status": item.status},
    }


@router.post("/contact/newsletter")
@limiter.limit(newsletter_limit, error_message=NEWSLETTER_LIMIT_MESSAGE)
def subscribe_newsletter(request: Request, payload: dict = Body(...), db: Session = Depends(get_db)):
    result = ContactService(db).subscribe_newsletter(payload, request_meta(request))
    return {"success": True, **result}


@router.get("/contact")
def list_submissions(
    page: int = Query(1),
    limit: int = Query(20),
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    service_interest: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    user: AdminUser = Depends(require_permission("contacts", "read")),
    db: Session = Depends(get_db),
):
    service = ContactService(db)
    filters = {"status": status, "priority": priority, "service_interest": service_interest, "search": search}
    result = service.list(filters, page=page, limit=limit, public=False)
    return {"success": True, **result.to_dict(service.collection_key, service.serialize)}


@router.get("/contact/stats")
def contact_stats(
    period: str = Query("30d"),
    user: AdminUser = Depends(require_permission("contacts", "read")),
    db: Session = Depends(get_db),
):
    return {"success": True, "data": ContactService(db).stats(period)}


@router.get("/contact/newsletter")
def newsletter_subscribers(
    user: AdminUser = Depends(require_permission("contacts", "read")),
    db: Session = Depends(get_db),
):
    subscribers = ContactService(db).newsletter_subscribers()
    return {"success": True, "subscribers": subscribers, "total": len(subscribers)}


@router.get("/contact/{submission_id}")
def get_submission(
    submission_id: int,
    user: AdminUser = Depends(require_permission("contacts", "read")),
    db: Session = Depends(get_db),
):
    service = ContactService(db)
    return {"success": True, "data": service.serialize(service.get_by_id(submission_id))}


@router.put("/contact/{submission_id}/status")
def update_submission_status(
    submission_id: int,
    payload: dict = Body(...),
    user: AdminUser = Depends(require_permission("contacts", "write")),
    db: Session = Depends(get_db),
):
    service = ContactService(db)
    item = service.update_status(submission_id, payload)
    return {"success": True, "message": "Submission status updated", "data": service.serialize(item)}


@router.delete("/contact/{submission_id}")
def delete_submission(
    submission_id: int,
    user: AdminUser = Depends(require_permission("contacts", "delete")),
    db: Session = Depends(get_db),
):
    ContactService(db).delete(submission_id)
    return {"success": True, "message": "Submission deleted successfully"}
