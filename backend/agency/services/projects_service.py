from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Mapping, Optional

from sqlalchemy import String, asc, cast, desc, func, select

from ..models import Project
from ..schemas.content import ProjectIn
from .content_base import ContentService


SORT_FIELDS = ("created_at", "updated_at", "title", "view_count")


class ProjectsService(ContentService):
    model = Project
    schema = ProjectIn
    resource = "projects"
    collection_key = "projects"
    search_columns = ("title", "description", "technologies")
    exact_filters = ("category",)
    featured_column = "featured"

    def _visible(self, query, public: bool, filters: Mapping[str, Any]):
        if public:
            return query.where(Project.status == "published")
        status = filters.get("status") or "published"
        if status != "all":
            query = query.where(Project.status == status)
        return query

    def _extra_filters(self, query, filters: Mapping[str, Any]):
        technology = filters.get("technology")
        if technology:
            query = query.where(cast(Project.technologies, String).ilike(f"%{technology}%"))
        return query

    def _ordering(self, filters: Mapping[str, Any]) -> list:
        sort = filters.get("sort") if filters.get("sort") in SORT_FIELDS else "created_at"
        direction = asc if str(filters.get("order") or "desc").lower() == "asc" else desc
        return [desc(Project.featured), direction(getattr(Project, sort)), desc(Project.id)]

    def _prepare(self, values: Dict[str, Any], existing: Optional[Project] = None) -> Dict[str, Any]:
        exclude_id = existing.id if existing is not None else None
        if values.get("slug"):
            values["slug"] = self.unique_slug(values["slug"], exclude_id)
        elif existing is None or "slug" in values:
            title = values.get("title") or (existing.title if existing is not None else "")
            values["slug"] = self.unique_slug(title, exclude_id)
        self._seo_defaults(values, "title", existing)
        return values

    def stats(self) -> Dict[str, Any]:
        breakdown = dict(
            self.db.execute(select(Project.status, func.count()).group_by(Project.status)).all()
        )
        technologies = Counter()
        for techs in self.db.execute(select(Project.technologies).where(Project.status == "published")).scalars():
            technologies.update(t for t in (techs or []) if t)
        return {
            "totalProjects": self.db.execute(select(func.count()).select_from(Project)).scalar_one(),
            "totalViews": self.db.execute(select(func.coalesce(func.sum(Project.view_count), 0))).scalar_one(),
            "featuredProjects": self.db.execute(
                select(func.count()).select_from(Project).where(Project.featured.is_(True))
            ).scalar_one(),
            "statusBreakdown": breakdown,
            "topTechnologies": [
                {"technology": tech, "count": count} for tech, count in technologies.most_common(10)
            ],
        }
