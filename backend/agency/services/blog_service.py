from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import String, cast, desc, func, select

from ..models import BlogPost
from ..schemas.content import BlogPostIn
from .company_service import CompanyService
from .content_base import ContentService, serialize_row


WORDS_PER_MINUTE = 200
DEFAULT_AUTHOR = "Editorial Team"
_TAG_RE = re.compile(r"<[^>]+>")


def count_words(content: str) -> int:
    return len(_TAG_RE.sub(" ", content or "").split())


def reading_time(words: int) -> int:
    return math.ceil(words / WORDS_PER_MINUTE)


class BlogService(ContentService):
    model = BlogPost
    schema = BlogPostIn
    resource = "blog"
    collection_key = "posts"
    search_columns = ("title", "excerpt", "content")
    exact_filters = ("category",)
    featured_column = "featured"

    def _visible(self, query, public: bool, filters: Mapping[str, Any]):
        if public:
            return query.where(BlogPost.status == "published", BlogPost.published_at <= datetime.utcnow())
        status = filters.get("status") or "published"
        if status != "all":
            query = query.where(BlogPost.status == status)
        return query

    def _extra_filters(self, query, filters: Mapping[str, Any]):
        tag = filters.get("tag")
        if tag:
            query = query.where(cast(BlogPost.tags, String).ilike(f'%"{tag}"%'))
        author = filters.get("author")
        if author and str(author).strip():
            query = query.where(BlogPost.author_name.ilike(f"%{str(author).strip()}%"))
        return query

    def _ordering(self, filters: Mapping[str, Any]) -> list:
        return [desc(BlogPost.published_at), desc(BlogPost.created_at), desc(BlogPost.id)]

    def _prepare(self, values: Dict[str, Any], existing: Optional[BlogPost] = None) -> Dict[str, Any]:
        exclude_id = existing.id if existing is not None else None
        if values.get("slug"):
            values["slug"] = self.unique_slug(values["slug"], exclude_id)
        elif existing is None or "slug" in values:
            title = values.get("title") or (existing.title if existing is not None else "")
            values["slug"] = self.unique_slug(title, exclude_id)
        if "content" in values:
            words = count_words(values["content"])
            values["word_count"] = words
            values["reading_time"] = reading_time(words)
        status = values.get("status", existing.status if existing is not None else "draft")
        published_at = values.get("published_at", existing.published_at if existing is not None else None)
        if status == "published" and published_at is None:
            values["published_at"] = datetime.utcnow()
        if existing is None and not values.get("author_name"):
            values["author_name"] = self.default_author()
        self._seo_defaults(values, "title", existing)
        return values

    def default_author(self) -> str:
        company = CompanyService(self.db).content_map(["company_name"]).get("company_name")
        return f"{company} Team" if company else DEFAULT_AUTHOR

    def serialize(self, item: BlogPost) -> Dict[str, Any]:
        data = serialize_row(item)
        author = item.author
        data["author"] = (
            {"id": author.id, "name": author.name, "position": author.position, "profile_image": author.profile_image}
            if author is not None
            else None
        )
        return data

    def related(self, post: BlogPost, limit: int = 3) -> List[BlogPost]:
        query = select(BlogPost).where(BlogPost.id != post.id)
        query = self._visible(query, True, {})
        if post.category:
            query = query.where(BlogPost.category == post.category)
        return list(self.db.execute(query.order_by(*self._ordering({})).limit(limit)).scalars().all())

    def categories(self) -> List[Dict[str, Any]]:
        query = self._visible(
            select(BlogPost.category, func.count()).where(BlogPost.category.is_not(None)), True, {}
        ).group_by(BlogPost.category).order_by(desc(func.count()), BlogPost.category)
        return [{"category": category, "count": count} for category, count in self.db.execute(query).all()]

    def stats(self) -> Dict[str, Any]:
        breakdown = dict(self.db.execute(select(BlogPost.status, func.count()).group_by(BlogPost.status)).all())
        return {
            "totalPosts": sum(breakdown.values()),
            "publishedPosts": breakdown.get("published", 0),
            "draftPosts": breakdown.get("draft", 0),
            "totalViews": self.db.execute(select(func.coalesce(func.sum(BlogPost.view_count), 0))).scalar_one(),
            "statusBreakdown": breakdown,
            "categories": self.categories(),
        }
