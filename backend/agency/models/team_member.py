from __future__ import annotations

from datetime import datetime
from sqlalchemy import JSON, Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


EXPERTISE_LEVELS = ("junior", "mid", "senior", "lead", "architect")


def default_social_links() -> dict:
    return {"linkedin": "", "github": "", "twitter": "", "portfolio": "", "behance": "", "dribbble": ""}


class TeamMember(Base):
    __tablename__ = "team_members"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(300), unique=True, nullable=False, index=True)
    position: Mapped[str] = mapped_column(String(255), nullable=False)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    short_bio: Mapped[str | None] = mapped_column(String(500), nullable=True)
    profile_image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    skills: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    expertise_level: Mapped[str] = mapped_column(String(20), nullable=False, default="mid")
    years_experience: Mapped[int | None] = mapped_column(Integer, nullable=True)
    social_links: Mapped[dict] = mapped_column(JSON, nullable=False, default=default_social_links)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    show_in_about: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
