from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..errors import NotFound, ValidationError
from ..models import CompanyInfo
from ..schemas.content import CompanyEntryIn
from ..utils.redis_cache import invalidate_tag
from .content_base import validate_payload


logger = logging.getLogger(__name__)
CACHE_TAG = "company"


def decode_value(raw: Optional[str], value_type: str) -> Any:
    if raw is None:
        return None
    if value_type == "json":
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("company_info json value is not valid json: %r", raw[:80])
            return raw
    if value_type == "number":
        try:
            number = float(raw)
        except ValueError:
            return raw
        return int(number) if number.is_integer() else number
    if value_type == "boolean":
        return raw.strip().lower() in ("true", "1", "yes")
    return raw


def encode_value(value: Any, value_type: str) -> Optional[str]:
    if value is None:
        return None
    if value_type == "json":
        if isinstance(value, str):
            try:
                json.loads(value)
            except ValueError:
                raise ValidationError({"value": "Value must be valid JSON"})
            return value
        return json.dumps(value, ensure_ascii=False)
    if value_type == "boolean":
        if isinstance(value, str):
            return "true" if value.strip().lower() in ("true", "1", "yes") else "false"
        return "true" if value else "false"
    if value_type == "number":
        try:
            float(value)
        except (TypeError, ValueError):
            raise ValidationError({"value": "Value must be a number"})
        return str(value)
    if value_type == "email" and "@" not in str(value):
        raise ValidationError({"value": "Value must be a valid email address"})
    if value_type == "url" and not str(value).startswith(("http://", "https://")):
        raise ValidationError({"value": "Value must be a URL with protocol (http/https)"})
    return str(value)


def _guess_type(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, (dict, list)):
        return "json"
    return "text"


class CompanyService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _rows(self, keys: Optional[Iterable[str]] = None, include_private: bool = False):
        query = select(CompanyInfo)
        if keys:
            query = query.where(CompanyInfo.key.in_(list(keys)))
        if not include_private:
            query = query.where(CompanyInfo.is_public.is_(True))
        return self.db.execute(query.order_by(CompanyInfo.category, CompanyInfo.key)).scalars().all()

    def content_map(self, keys: Optional[Iterable[str]] = None, include_private: bool = False) -> Dict[str, Any]:
        return {row.key: decode_value(row.value, row.type) for row in self._rows(keys, include_private)}

    def entries(self, include_private: bool = False) -> list:
        return [self.serialize(row) for row in self._rows(include_private=include_private)]

    def get(self, key: str, include_private: bool = False) -> CompanyInfo:
        entry = self.db.execute(select(CompanyInfo).where(CompanyInfo.key == key)).scalar_one_or_none()
        # private keys look missing to anonymous callers
        if entry is None or (not entry.is_public and not include_private):
            raise NotFound(f"Company info '{key}' not found")
        return entry

    def upsert(
        self,
        key: str,
        value: Any,
        type: Optional[str] = None,
        category: Optional[str] = None,
        description: Optional[str] = None,
        is_public: Optional[bool] = None,
    ) -> CompanyInfo:
        if not key or not key.strip():
            raise ValidationError({"key": "Key is required"})
        key = key.strip()
        existing = self.db.execute(select(CompanyInfo).where(CompanyInfo.key == key)).scalar_one_or_none()
        data = validate_payload(
            CompanyEntryIn,
            {
                "value": value,
                "type": type or (existing.type if existing else _guess_type(value)),
                "category": category if category is not None else (existing.category if existing else "general"),
                "description": description if description is not None else (existing.description if existing else None),
                "is_public": is_public if is_public is not None else (existing.is_public if existing else True),
            },
        )
        encoded = encode_value(data.value, data.type)
        if existing:
            existing.value = encoded
            existing.type = data.type
            existing.category = data.category
            existing.description = data.description
            existing.is_public = data.is_public
            entry = existing
        else:
            entry = CompanyInfo(
                key=key,
                value=encoded,
                type=data.type,
                category=data.category,
                description=data.description,
                is_public=data.is_public,
            )
            self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        invalidate_tag(CACHE_TAG)
        return entry

    def upsert_bulk(self, data: Dict[str, Any]) -> list:
        saved = []
        for key, value in data.items():
            if isinstance(value, dict) and "value" in value:
                options = {k: value[k] for k in ("type", "category", "description", "is_public") if k in value}
                saved.append(self.upsert(key, value["value"], **options))
            else:
                saved.append(self.upsert(key, value))
        return saved

    def serialize(self, entry: CompanyInfo) -> Dict[str, Any]:
        return {
            "key": entry.key,
            "value": decode_value(entry.value, entry.type),
            "type": entry.type,
            "category": entry.category,
            "description": entry.description,
            "is_public": entry.is_public,
        }
