from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Optional, List, Literal, Dict, Any


ProjectCategory = Literal["web_application", "mobile_application", "desktop_application", "e_commerce", "cms", "api"]
PublicationStatus = Literal["draft", "published", "archived"]
ExpertiseLevel = Literal["junior", "mid", "senior", "lead", "architect"]
ServiceCategory = Literal["web_development", "mobile_development", "custom_software", "ui_ux_design", "enterprise_solutions"]
PricingModel = Literal["fixed", "hourly", "project_based", "monthly", "custom"]
ServiceInterest = Literal[
    "web_development",
    "mobile_development",
    "custom_software",
    "ui_ux_design",
    "enterprise_solutions",
    "consultation",
    "other",
]
BudgetRange = Literal["under_5k", "5k_10k", "10k_25k", "25k_50k", "50k_plus", "not_specified"]
Timeline = Literal["urgent", "1_month", "3_months", "6_months", "flexible"]
SubmissionStatus = Literal["new", "in_progress", "responded", "closed"]
Priority = Literal["low", "medium", "high"]
ValueType = Literal["text", "json", "html", "number", "boolean", "url", "email"]

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class PayloadModel(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class ProjectIn(PayloadModel):
    title: str = Field(min_length=1, max_length=255)
    slug: Optional[str] = Field(default=None, pattern=SLUG_PATTERN, max_length=300)
    description: str = Field(min_length=1)
    short_description: Optional[str] = Field(default=None, max_length=500)
    overview: Optional[str] = None
    key_features: List[str] = Field(default_factory=list)
    technical_implementation: Optional[str] = None
    content: Optional[str] = None
    featured_image: Optional[str] = None
    images: List[Any] = Field(default_factory=list)
    technologies: List[str] = Field(default_factory=list)
    category: ProjectCategory = "web_application"
    status: PublicationStatus = "draft"
    featured: bool = False
    client_name: Optional[str] = Field(default=None, max_length=255)
    project_url: Optional[str] = Field(default=None, max_length=500)
    github_url: Optional[str] = Field(default=None, max_length=500)
    start_date: Optional[datetime] = None
    completion_date: Optional[datetime] = None
    seo_title: Optional[str] = Field(default=None, max_length=60)
    seo_description: Optional[str] = Field(default=None, max_length=160)
    seo_keywords: List[str] = Field(default_factory=list)


class BlogPostIn(PayloadModel):
    title: str = Field(min_length=1, max_length=255)
    slug: Optional[str] = Field(default=None, pattern=SLUG_PATTERN, max_length=300)
    excerpt: Optional[str] = None
    content: str = Field(min_length=1)
    featured_image: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)
    tags: List[str] = Field(default_factory=list)
    status: PublicationStatus = "draft"
    featured: bool = False
    published_at: Optional[datetime] = None
    author_name: Optional[str] = Field(default=None, max_length=255)
    author_id: Optional[int] = None
    seo_title: Optional[str] = Field(default=None, max_length=60)
    seo_description: Optional[str] = Field(default=None, max_length=160)


class TeamMemberIn(PayloadModel):
    name: str = Field(min_length=2, max_length=255)
    slug: Optional[str] = Field(default=None, pattern=SLUG_PATTERN, max_length=300)
    position: str = Field(min_length=2, max_length=255)
    department: Optional[str] = Field(default=None, max_length=100)
    bio: Optional[str] = None
    short_bio: Optional[str] = Field(default=None, max_length=500)
    profile_image: Optional[str] = None
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)
    skills: List[str] = Field(default_factory=list)
    expertise_level: ExpertiseLevel = "mid"
    years_experience: Optional[int] = Field(default=None, ge=0, le=50)
    social_links: Dict[str, str] = Field(default_factory=dict)
    display_order: int = 0
    is_featured: bool = False
    is_active: bool = True
    show_in_about: bool = True

    @field_validator("email")
    @classmethod
    def _email_shape(cls, value: Optional[str]) -> Optional[str]:
        if value and "@" not in value:
            raise ValueError("Must be a valid email address")
        return value or None


class ServiceIn(PayloadModel):
    name: str = Field(min_length=1, max_length=255)
    slug: Optional[str] = Field(default=None, pattern=SLUG_PATTERN, max_length=300)
    short_description: str = Field(min_length=1, max_length=500)
    description: str = Field(min_length=1)
    icon: Optional[str] = Field(default=None, max_length=100)
    featured_image: Optional[str] = None
    category: ServiceCategory
    features: List[str] = Field(default_factory=list)
    technologies: List[str] = Field(default_factory=list)
    pricing_model: Optional[PricingModel] = None
    starting_price: Optional[float] = Field(default=None, ge=0)
    price_currency: str = Field(default="USD", min_length=3, max_length=3)
    is_featured: bool = False
    is_active: bool = True
    show_in_homepage: bool = True
    display_order: int = 0


class ContactIn(PayloadModel):
    name: str = Field(min_length=2, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)
    company: Optional[str] = Field(default=None, max_length=255)
    subject: Optional[str] = Field(default=None, max_length=255)
    message: str = Field(min_length=10, max_length=5000)
    service_interest: Optional[ServiceInterest] = None
    budget_range: Optional[BudgetRange] = None
    timeline: Optional[Timeline] = None
    source: Optional[str] = Field(default="website", max_length=100)

    @field_validator("email")
    @classmethod
    def _email_shape(cls, value: str) -> str:
        if "@" not in value or value.startswith("@") or value.endswith("@"):
            raise ValueError("Must be a valid email address")
        return value.lower()


class NewsletterIn(PayloadModel):
    email: str = Field(min_length=3, max_length=255)
    name: Optional[str] = Field(default=None, max_length=255)

    @field_validator("email")
    @classmethod
    def _email_shape(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("Must be a valid email address")
        return value.lower()


class ContactStatusIn(PayloadModel):
    status: SubmissionStatus
    priority: Optional[Priority] = None
    notes: Optional[str] = None
    assigned_to: Optional[int] = None


class CompanyEntryIn(PayloadModel):
    value: Any = None
    type: ValueType = "text"
    category: Optional[str] = Field(default=None, max_length=50)
    description: Optional[str] = Field(default=None, max_length=255)
    is_public: bool = True
