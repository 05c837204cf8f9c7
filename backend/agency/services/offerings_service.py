from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import asc, desc, select

from ..models import Service
from ..schemas.content import ServiceIn
from .content_base import ContentService, parse_bool


class OfferingsService(ContentService):
    """Services the agency sells; named apart from the service-layer classes."""

    model = Service
    schema = ServiceIn
    resource = "services"
    collection_key = "services"
    search_columns = ("name", "short_description", "description")
    exact_filters = ("category", "pricing_model")
    featured_column = "is_featured"

    def _visible(self, query, public: bool, filters: Mapping[str, Any]):
        if public:
            return query.where(Service.is_active.is_(True))
        active = filters.get("is_active", "true")
        if active != "all":
            query = query.where(Service.is_active.is_(parse_bool(active) is not False))
        return query

    def _ordering(self, filters: Mapping[str, Any]) -> list:
        return [desc(Service.is_featured), asc(Service.display_order), desc(Service.created_at), desc(Service.id)]

    def _prepare(self, values: Dict[str, Any], existing: Optional[Service] = None) -> Dict[str, Any]:
        exclude_id = existing.id if existing is not None else None
        if values.get("slug"):
            values["slug"] = self.unique_slug(values["slug"], exclude_id)
        elif existing is None or "slug" in values:
            name = values.get("name") or (existing.name if existing is not None else "")
            values["slug"] = self.unique_slug(name, exclude_id)
        if values.get("price_currency"):
            values["price_currency"] = values["price_currency"].upper()
        return values

    def featured(self, limit: int = 6) -> List[Service]:
        query = self._visible(select(Service), True, {}).where(Service.is_featured.is_(True))
        return list(self.db.execute(query.order_by(*self._ordering({})).limit(limit)).scalars().all())
