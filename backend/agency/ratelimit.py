from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings


limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.REDIS_URL or "memory://",
    in_memory_fallback_enabled=True,
    enabled=settings.RATE_LIMIT_ENABLED,
)


def auth_limit() -> str:
    return settings.RATE_LIMIT_AUTH


def contact_limit() -> str:
    return settings.RATE_LIMIT_CONTACT


def newsletter_limit() -> str:
    return settings.RATE_LIMIT_NEWSLETTER


AUTH_LIMIT_MESSAGE = "Too many authentication attempts. Please try again later."
CONTACT_LIMIT_MESSAGE = "Too many contact form submissions. Please try again later."
NEWSLETTER_LIMIT_MESSAGE = "Too many subscription attempts. Please try again later."
