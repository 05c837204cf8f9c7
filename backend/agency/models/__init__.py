from .base import Base
from .admin_user import AdminUser
from .project import Project
from .team_member import TeamMember
from .blog_post import BlogPost
from .service import Service
from .contact_submission import ContactSubmission
from .company_info import CompanyInfo

__all__ = [
    "Base",
    "AdminUser",
    "Project",
    "TeamMember",
    "BlogPost",
    "Service",
    "ContactSubmission",
    "CompanyInfo",
]
