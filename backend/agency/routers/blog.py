from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from ..auth import can_read, optional_admin, require_permission
from ..db import get_db
from ..models import AdminUser
from ..services.blog_service import BlogService
from ..utils.redis_cache import cached_json


router = APIRouter()


@router.get("/blog")
def list_posts(
    page: int = Query(1),
    limit: int = Query(10),
    status: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    author: Optional[str] = Query(None),
    featured: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    user: AdminUser | None = Depends(optional_admin),
    db: Session = Depends(get_db),
):
    service = BlogService(db)
    public = not can_read(user, "blog")
    filters = {"status": status, "category": category, "tag": tag, "author": author, "featured": featured, "search": search}

    def produce():
        result = service.list(filters, page=page, limit=limit, public=public)
        return {"success": True, **result.to_dict(service.collection_key, service.serialize)}

    if public:
        return cached_json("blog", "list", {**filters, "page": page, "limit": limit}, produce)
    return produce()


@router.get("/blog/stats")
def blog_stats(db: Session = Depends(get_db)):
    return {"success": True, "data": BlogService(db).stats()}


@router.get("/blog/categories")
def blog_categories(db: Session = Depends(get_db)):
    return {"success": True, "data": cached_json("blog", "categories", None, BlogService(db).categories)}


def _post_detail(service: BlogService, id_or_slug: str, public: bool) -> dict:
    post = service.get(id_or_slug, public=public, track_view=public)
    return {
        "success": True,
        "data": service.serialize(post),
        "related": [service.serialize(p) for p in service.related(post)],
    }


@router.get("/blog/slug/{slug}")
def get_post_by_slug(
    slug: str,
    user: AdminUser | None = Depends(optional_admin),
    db: Session = Depends(get_db),
):
    return _post_detail(BlogService(db), slug, public=not can_read(user, "blog"))


@router.get("/blog/{id_or_slug}")
def get_post(
    id_or_slug: str,
    user: AdminUser | None = Depends(optional_admin),
    db: Session = Depends(get_db),
):
    return _post_detail(BlogService(db), id_or_slug, public=not can_read(user, "blog"))


@router.post("/blog", status_code=201)
def create_post(
    payload: dict = Body(...),
    user: AdminUser = Depends(require_permission("blog", "write")),
    db: Session = Depends(get_db),
):
    service = BlogService(db)
    post = service.create(payload)
    return {"success": True, "message": "Blog post created successfully", "data": service.serialize(post)}


@router.put("/blog/{post_id}")
def update_post(
    post_id: int,
    payload: dict = Body(...),
    user: AdminUser = Depends(require_permission("blog", "write")),
    db: Session = Depends(get_db),
):
    service = BlogService(db)
    post = service.update(post_id, payload)
    return {"success": True, "message": "Blog post updated successfully", "data": service.serialize(post)}


@router.delete("/blog/{post_id}")
def delete_post(
    post_id: int,
    user: AdminUser = Depends(require_permission("blog", "delete")),
    db: Session = Depends(get_db),
):
    BlogService(db).delete(post_id)
    return {"success": True, "message": "Blog post deleted successfully"}
