from __future__ import annotations

import argparse
import os
from typing import Any, Dict, List

from sqlalchemy import select

from backend.agency.db import SessionLocal, engine
from backend.agency.errors import ValidationError
from backend.agency.models import AdminUser, Base, Project, Service, TeamMember
from backend.agency.services.auth_service import SessionService
from backend.agency.services.company_service import CompanyService
from backend.agency.services.offerings_service import OfferingsService
from backend.agency.services.projects_service import ProjectsService
from backend.agency.services.team_service import TeamService


COMPANY_INFO: Dict[str, Dict[str, Any]] = {
    "company_name": {"value": "Northwind Digital", "type": "text", "category": "basic", "description": "Company name"},
    "tagline": {"value": "Software studio for web and mobile products", "type": "text", "category": "basic", "description": "Company tagline"},
    "company_description": {
        "value": "We design, build and run web platforms, mobile apps and custom software for growing businesses.",
        "type": "text",
        "category": "basic",
        "description": "Company description",
    },
    "mission": {
        "value": "Help businesses ship reliable digital products that their customers enjoy using.",
        "type": "text",
        "category": "about",
        "description": "Mission statement",
    },
    "core_values": {
        "value": ["Quality", "Transparency", "Collaboration", "Continuous learning"],
        "type": "json",
        "category": "about",
        "description": "Core values",
    },
    "founded_year": {"value": 2016, "type": "number", "category": "about", "description": "Founding year"},
    "email": {"value": "hello@example.com", "type": "email", "category": "contact", "description": "Public contact email"},
    "phone": {"value": "+1 555 0100", "type": "text", "category": "contact", "description": "Public phone"},
    "website": {"value": "https://example.com", "type": "url", "category": "contact", "description": "Website"},
    "lead_email": {
        "value": "sales@example.com",
        "type": "email",
        "category": "internal",
        "description": "Inbox for contact form notifications",
        "is_public": False,
    },
}

ADMINS: List[Dict[str, str]] = [
    {"email": "admin@example.com", "first_name": "Site", "last_name": "Owner", "role": "super_admin"},
    {"email": "manager@example.com", "first_name": "Content", "last_name": "Manager", "role": "admin"},
    {"email": "editor@example.com", "first_name": "Content", "last_name": "Editor", "role": "editor"},
]

SERVICES: List[Dict[str, Any]] = [
    {
        "name": "Web Development",
        "short_description": "Fast, accessible web applications and marketing sites.",
        "description": "From landing pages to complex SaaS platforms, built with modern frameworks.",
        "category": "web_development",
        "features": ["Responsive design", "SEO friendly", "CMS integration"],
        "is_featured": True,
        "display_order": 1,
    },
    {
        "name": "Mobile Apps",
        "short_description": "Native and cross-platform apps for iOS and Android.",
        "description": "Product discovery, design and delivery of mobile applications.",
        "category": "mobile_development",
        "features": ["iOS", "Android", "Offline support"],
        "is_featured": True,
        "display_order": 2,
    },
    {
        "name": "UI/UX Design",
        "short_description": "Research-driven interfaces people understand.",
        "description": "User research, prototyping and design systems.",
        "category": "ui_ux_design",
        "display_order": 3,
    },
]

PROJECTS: List[Dict[str, Any]] = [
    {
        "title": "Retail Analytics Platform",
        "description": "Dashboard suite that turns point-of-sale data into daily insights for store managers.",
        "short_description": "Real-time sales analytics for a retail chain.",
        "technologies": ["Python", "FastAPI", "PostgreSQL", "React"],
        "category": "web_application",
        "status": "published",
        "featured": True,
        "client_name": "Acme Retail",
    },
    {
        "title": "Clinic Booking App",
        "description": "Mobile application for booking and managing clinic appointments.",
        "technologies": ["Flutter", "Firebase"],
        "category": "mobile_application",
        "status": "published",
    },
]

TEAM: List[Dict[str, Any]] = [
    {
        "name": "Alex Morgan",
        "position": "Chief Technology Officer",
        "department": "Engineering",
        "expertise_level": "architect",
        "skills": ["Architecture", "Python", "Cloud"],
        "is_featured": True,
        "display_order": 1,
    },
    {
        "name": "Sam Rivera",
        "position": "Lead Designer",
        "department": "Design",
        "expertise_level": "lead",
        "skills": ["UX research", "Figma"],
        "display_order": 2,
    },
]


def seed_company(db) -> int:
    CompanyService(db).upsert_bulk(COMPANY_INFO)
    return len(COMPANY_INFO)


def seed_admins(db, password: str) -> int:
    service = SessionService(db)
    created = 0
    for account in ADMINS:
        exists = db.execute(select(AdminUser.id).where(AdminUser.email == account["email"])).first()
        if exists:
            continue
        service.create_admin(password=password, **account)
        created += 1
    return created


def seed_content(db) -> int:
    created = 0
    for model, service_cls, rows, field in (
        (Service, OfferingsService, SERVICES, "name"),
        (Project, ProjectsService, PROJECTS, "title"),
        (TeamMember, TeamService, TEAM, "name"),
    ):
        for row in rows:
            column = getattr(model, field)
            if db.execute(select(model.id).where(column == row[field])).first():
                continue
            service_cls(db).create(row)
            created += 1
    return created


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo admins, company info and content")
    parser.add_argument("--password", default=os.getenv("SEED_ADMIN_PASSWORD", "ChangeMe123"))
    parser.add_argument("--create-tables", action="store_true", help="create tables without running migrations")
    parser.add_argument("--skip-content", action="store_true")
    args = parser.parse_args()

    if args.create_tables:
        Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        company = seed_company(db)
        admins = seed_admins(db, args.password)
        content = 0 if args.skip_content else seed_content(db)
    except ValidationError as exc:
        raise SystemExit(f"[seed] invalid seed data: {exc.fields}")
    finally:
        db.close()
    print(f"[seed] company_keys={company} admins_created={admins} content_created={content}")


if __name__ == "__main__":
    main()
