from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Mapping, Optional

from sqlalchemy import desc, func, select

from ..config import settings
from ..models import ContactSubmission
from ..models.contact_submission import NEWSLETTER_SUBJECT
from ..schemas.content import ContactIn, ContactStatusIn, NewsletterIn
from ..utils.mailer import send_mail
from .company_service import CompanyService
from .content_base import ContentService, validate_payload


logger = logging.getLogger(__name__)

STATS_PERIODS = {"7d": 7, "30d": 30, "90d": 90}


class ContactService(ContentService):
    model = ContactSubmission
    schema = ContactIn
    resource = "contacts"
    collection_key = "submissions"
    search_columns = ("name", "email", "company", "subject", "message")
    exact_filters = ("status", "priority", "service_interest")
    has_slug = False

    def _ordering(self, filters: Mapping[str, Any]) -> list:
        return [desc(ContactSubmission.created_at), desc(ContactSubmission.id)]

    def submit(self, payload: Mapping[str, Any], meta: Optional[Mapping[str, Any]] = None) -> ContactSubmission:
        data = validate_payload(ContactIn, payload)
        meta = meta or {}
        item = ContactSubmission(
            **data.model_dump(),
            status="new",
            ip_address=meta.get("ip_address"),
            user_agent=meta.get("user_agent"),
            referrer=meta.get("referrer"),
        )
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        self.invalidate()
        logger.info("contact submission id=%s email=%s interest=%s", item.id, item.email, item.service_interest)
        self._notify(item)
        return item

    def create(self, payload: Mapping[str, Any], author_id: Optional[int] = None) -> ContactSubmission:
        return self.submit(payload)

    def _notify(self, item: ContactSubmission) -> bool:
        body = (
            "New contact submission\n"
            f"Name: {item.name}\n"
            f"Email: {item.email}\n"
            f"Phone: {item.phone or '-'}\n"
            f"Company: {item.company or '-'}\n"
            f"Service: {item.service_interest or '-'}\n"
            f"Budget: {item.budget_range or '-'}\n"
            f"Timeline: {item.timeline or '-'}\n"
            f"Message:\n{item.message}\n"
        )
        recipient = settings.LEAD_EMAIL
        if not recipient:
            recipient = CompanyService(self.db).content_map(["lead_email"], include_private=True).get("lead_email")
        return send_mail(f"Contact: {item.subject or item.name}", body, [recipient or ""])

    def subscribe_newsletter(self, payload: Mapping[str, Any], meta: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        data = validate_payload(NewsletterIn, payload)
        existing = self.db.execute(
            select(ContactSubmission).where(
                ContactSubmission.email == data.email,
                ContactSubmission.subject == NEWSLETTER_SUBJECT,
            )
        ).scalars().first()
        if existing is not None:
            return {"message": "You are already subscribed to our newsletter!", "alreadySubscribed": True}
        meta = meta or {}
        self.db.add(
            ContactSubmission(
                email=data.email,
                name=data.name or "Newsletter Subscriber",
                subject=NEWSLETTER_SUBJECT,
                message="Newsletter subscription request",
                source="newsletter",
                status="new",
                ip_address=meta.get("ip_address"),
                user_agent=meta.get("user_agent"),
            )
        )
        self.db.commit()
        self.invalidate()
        logger.info("newsletter subscription email=%s", data.email)
        return {"message": "Successfully subscribed to our newsletter!", "subscribed": True}

    def newsletter_subscribers(self) -> list:
        rows = self.db.execute(
            select(ContactSubmission)
            .where(ContactSubmission.subject == NEWSLETTER_SUBJECT)
            .order_by(desc(ContactSubmission.created_at))
        ).scalars().all()
        return [{"email": r.email, "name": r.name, "subscribedAt": r.created_at.isoformat()} for r in rows]

    def update_status(self, item_id: int, payload: Mapping[str, Any]) -> ContactSubmission:
        data = validate_payload(ContactStatusIn, payload)
        item = self.get_by_id(item_id)
        item.status = data.status
        if data.priority is not None:
            item.priority = data.priority
        if data.notes is not None:
            item.notes = data.notes
        if data.assigned_to is not None:
            item.assigned_to = data.assigned_to
        if data.status == "responded" and item.responded_at is None:
            item.responded_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(item)
        self.invalidate()
        return item

    def update(self, item_id: int, payload: Mapping[str, Any]) -> ContactSubmission:
        return self.update_status(item_id, payload)

    def stats(self, period: str = "30d") -> Dict[str, Any]:
        days = STATS_PERIODS.get(period, 30)
        since = datetime.utcnow() - timedelta(days=days)
        count = select(func.count()).select_from(ContactSubmission)
        return {
            "period": period if period in STATS_PERIODS else "30d",
            "totalSubmissions": self.db.execute(count).scalar_one(),
            "recentSubmissions": self.db.execute(count.where(ContactSubmission.created_at >= since)).scalar_one(),
            "statusBreakdown": dict(
                self.db.execute(
                    select(ContactSubmission.status, func.count()).group_by(ContactSubmission.status)
                ).all()
            ),
            "serviceBreakdown": {
                interest or "unspecified": n
                for interest, n in self.db.execute(
                    select(ContactSubmission.service_interest, func.count()).group_by(ContactSubmission.service_interest)
                ).all()
            },
        }
