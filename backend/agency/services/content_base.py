from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import String, cast, desc, func, or_, select
from sqlalchemy.orm import Session

from ..errors import NotFound, ValidationError
from ..models import Base
from ..utils.redis_cache import invalidate_tag
from ..utils.slugify import slugify, truncate_title


MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 10


def parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    text = str(value).strip().lower()
    if text in ("true", "1", "yes", "on"):
        return True
    if text in ("false", "0", "no", "off"):
        return False
    return None


def check_page(page: Any, limit: Any) -> tuple[int, int]:
    fields = {}
    try:
        page_num = int(page)
    except (TypeError, ValueError):
        page_num = 0
    try:
        limit_num = int(limit)
    except (TypeError, ValueError):
        limit_num = 0
    if page_num < 1:
        fields["page"] = "Page must be a positive integer"
    if not 1 <= limit_num <= MAX_PAGE_SIZE:
        fields["limit"] = f"Limit must be between 1 and {MAX_PAGE_SIZE}"
    if fields:
        raise ValidationError(fields, "Invalid pagination parameters")
    return page_num, limit_num


def pagination_meta(page: int, limit: int, total: int) -> Dict[str, Any]:
    total_pages = math.ceil(total / limit) if total else 0
    return {
        "currentPage": page,
        "totalPages": total_pages,
        "total": total,
        "perPage": limit,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }


def validate_payload(schema: Type[BaseModel], data: Mapping[str, Any]) -> BaseModel:
    """Validate with pydantic and report every offending field at once."""
    try:
        return schema.model_validate(dict(data or {}))
    except PydanticValidationError as exc:
        fields: Dict[str, str] = {}
        for err in exc.errors():
            name = ".".join(str(part) for part in err.get("loc", ())) or "__root__"
            fields.setdefault(name, err.get("msg", "Invalid value"))
        raise ValidationError(fields)


def serialize_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def serialize_row(row: Base) -> Dict[str, Any]:
    return {col.name: serialize_value(getattr(row, col.key)) for col in row.__table__.columns}


@dataclass
class ListResult:
    items: List[Any]
    total: int
    pagination: Dict[str, Any]
    filters: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self, key: str, serializer=serialize_row) -> Dict[str, Any]:
        return {
            key: [serializer(item) for item in self.items],
            "total": self.total,
            "pagination": self.pagination,
            "filters": self.filters,
        }


class ContentService:
    """Shared list/get/create/update/delete over one content table.

    Subclasses set the model, payload schema and cache tag, and override the
    hooks for visibility, ordering, filters and derived fields.
    """

    model: Type[Base]
    schema: Type[BaseModel]
    resource: str = ""
    collection_key: str = "items"
    search_columns: Sequence[str] = ()
    exact_filters: Sequence[str] = ()
    featured_column: Optional[str] = None
    has_slug: bool = True

    def __init__(self, db: Session) -> None:
        self.db = db

    # hooks

    def _visible(self, query, public: bool, filters: Mapping[str, Any]):
        return query

    def _ordering(self, filters: Mapping[str, Any]) -> list:
        return [desc(self.model.created_at), desc(self.model.id)]

    def _extra_filters(self, query, filters: Mapping[str, Any]):
        return query

    def _prepare(self, values: Dict[str, Any], existing: Optional[Base] = None) -> Dict[str, Any]:
        return values

    # helpers

    def _column(self, name: str):
        return getattr(self.model, name)

    def _search_clause(self, term: str):
        pattern = f"%{term.strip()}%"
        return or_(*[cast(self._column(name), String).ilike(pattern) for name in self.search_columns])

    def _apply_filters(self, query, filters: Mapping[str, Any]):
        for name in self.exact_filters:
            value = filters.get(name)
            if value is None or value == "" or value == "all":
                continue
            query = query.where(self._column(name) == value)
        featured = parse_bool(filters.get("featured"))
        if self.featured_column and featured is not None:
            query = query.where(self._column(self.featured_column).is_(featured))
        search = filters.get("search")
        if search and str(search).strip() and self.search_columns:
            query = query.where(self._search_clause(str(search)))
        return self._extra_filters(query, filters)

    def unique_slug(self, base: str, exclude_id: Optional[int] = None) -> str:
        root = slugify(base)
        candidate = root
        suffix = 1
        while True:
            query = select(self.model.id).where(self.model.slug == candidate)
            if exclude_id is not None:
                query = query.where(self.model.id != exclude_id)
            if self.db.execute(query).first() is None:
                return candidate
            candidate = f"{root}-{suffix}"
            suffix += 1

    def _seo_defaults(self, values: Dict[str, Any], title_field: str, existing: Optional[Base] = None) -> None:
        title = values.get(title_field)
        if existing is not None and existing.seo_title and "seo_title" not in values:
            return
        if title and not values.get("seo_title"):
            values["seo_title"] = truncate_title(title)

    # operations

    def list(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        page: Any = 1,
        limit: Any = DEFAULT_PAGE_SIZE,
        public: bool = True,
    ) -> ListResult:
        filters = dict(filters or {})
        page_num, limit_num = check_page(page, limit)
        query = select(self.model)
        query = self._visible(query, public, filters)
        query = self._apply_filters(query, filters)
        total = self.db.execute(select(func.count()).select_from(query.subquery())).scalar_one()
        rows = (
            self.db.execute(
                query.order_by(*self._ordering(filters)).offset((page_num - 1) * limit_num).limit(limit_num)
            )
            .scalars()
            .all()
        )
        return ListResult(
            items=list(rows),
            total=total,
            pagination=pagination_meta(page_num, limit_num, total),
            filters={k: v for k, v in filters.items() if v not in (None, "")},
        )

    def published(self) -> List[Any]:
        """Every publicly visible row, unpaginated."""
        query = self._visible(select(self.model), True, {})
        return list(self.db.execute(query.order_by(*self._ordering({}))).scalars().all())

    def _lookup(self, id_or_slug: Any):
        key = str(id_or_slug).strip()
        if key.isdigit():
            return select(self.model).where(self.model.id == int(key))
        if not self.has_slug:
            raise NotFound(f"{self.model.__name__} not found")
        return select(self.model).where(self.model.slug == key)

    def get(self, id_or_slug: Any, public: bool = True, track_view: bool = False):
        # admin detail reads see every status
        query = self._visible(self._lookup(id_or_slug), public, {} if public else {"status": "all", "is_active": "all"})
        item = self.db.execute(query).scalar_one_or_none()
        if item is None:
            raise NotFound(f"{self.model.__name__} not found")
        if track_view and hasattr(item, "view_count"):
            item.view_count = (item.view_count or 0) + 1
            self.db.commit()
            self.db.refresh(item)
        return item

    def get_by_id(self, item_id: int):
        item = self.db.get(self.model, item_id)
        if item is None:
            raise NotFound(f"{self.model.__name__} not found")
        return item

    def create(self, payload: Mapping[str, Any], author_id: Optional[int] = None):
        data = validate_payload(self.schema, payload)
        values = data.model_dump()
        if author_id is not None and hasattr(self.model, "author_id") and not values.get("author_id"):
            values["author_id"] = author_id
        values = self._prepare(values)
        item = self.model(**values)
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        self.invalidate()
        return item

    def update(self, item_id: int, payload: Mapping[str, Any]):
        item = self.get_by_id(item_id)
        current = {
            name: getattr(item, name)
            for name in self.schema.model_fields
            if hasattr(item, name)
        }
        incoming = {k: v for k, v in dict(payload or {}).items() if k in self.schema.model_fields}
        merged = validate_payload(self.schema, {**current, **incoming})
        values = merged.model_dump(include=set(incoming))
        values = self._prepare(values, existing=item)
        for name, value in values.items():
            setattr(item, name, value)
        self.db.commit()
        self.db.refresh(item)
        self.invalidate()
        return item

    def delete(self, item_id: int) -> None:
        item = self.get_by_id(item_id)
        self.db.delete(item)
        self.db.commit()
        self.invalidate()

    def invalidate(self) -> None:
        if self.resource:
            invalidate_tag(self.resource)

    def serialize(self, item) -> Dict[str, Any]:
        return serialize_row(item)
