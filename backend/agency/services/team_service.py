from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from sqlalchemy import asc, desc, func, select

from ..models import TeamMember
from ..models.team_member import default_social_links
from ..schemas.content import TeamMemberIn
from .content_base import ContentService, parse_bool


class TeamService(ContentService):
    model = TeamMember
    schema = TeamMemberIn
    resource = "team"
    collection_key = "teamMembers"
    search_columns = ("name", "position", "bio", "skills")
    exact_filters = ("department", "expertise_level")
    featured_column = "is_featured"

    def _visible(self, query, public: bool, filters: Mapping[str, Any]):
        if public:
            return query.where(TeamMember.is_active.is_(True))
        active = filters.get("is_active", "true")
        if active != "all":
            query = query.where(TeamMember.is_active.is_(parse_bool(active) is not False))
        return query

    def _ordering(self, filters: Mapping[str, Any]) -> list:
        return [desc(TeamMember.is_featured), asc(TeamMember.display_order), asc(TeamMember.created_at), asc(TeamMember.id)]

    def _prepare(self, values: Dict[str, Any], existing: Optional[TeamMember] = None) -> Dict[str, Any]:
        exclude_id = existing.id if existing is not None else None
        if values.get("slug"):
            values["slug"] = self.unique_slug(values["slug"], exclude_id)
        elif existing is None or "slug" in values:
            name = values.get("name") or (existing.name if existing is not None else "")
            values["slug"] = self.unique_slug(name, exclude_id)
        if "social_links" in values:
            values["social_links"] = {**default_social_links(), **(values["social_links"] or {})}
        return values

    def stats(self) -> Dict[str, Any]:
        active = TeamMember.is_active.is_(True)
        departments = self.db.execute(
            select(TeamMember.department, func.count()).where(active).group_by(TeamMember.department)
        ).all()
        levels = self.db.execute(
            select(TeamMember.expertise_level, func.count()).where(active).group_by(TeamMember.expertise_level)
        ).all()
        return {
            "totalMembers": self.db.execute(select(func.count()).select_from(TeamMember)).scalar_one(),
            "activeMembers": self.db.execute(select(func.count()).select_from(TeamMember).where(active)).scalar_one(),
            "featuredMembers": self.db.execute(
                select(func.count()).select_from(TeamMember).where(active, TeamMember.is_featured.is_(True))
            ).scalar_one(),
            "departmentBreakdown": {dept or "unassigned": count for dept, count in departments},
            "expertiseBreakdown": dict(levels),
        }
