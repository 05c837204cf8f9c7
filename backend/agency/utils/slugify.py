import re
import unicodedata

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    normalized = unicodedata.normalize("NFKD", text or "").encode("ascii", "ignore").decode("ascii")
    slug = _NON_SLUG.sub("-", normalized.lower()).strip("-")
    return slug or "item"


def truncate_title(title: str, limit: int = 60) -> str:
    if len(title) <= limit:
        return title
    return title[: limit - 3].rstrip() + "..."
