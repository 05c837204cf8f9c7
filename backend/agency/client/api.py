from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .http import ApiClient
from .normalize import normalize_collection, unwrap
from .query_cache import QueryCache


class ContentApi:
    """Query and mutation helpers per content type.

    Reads go through the query cache under the content type's tag; every
    successful write invalidates that tag.
    """

    def __init__(self, client: ApiClient, cache: QueryCache | None = None) -> None:
        self.client = client
        self.cache = cache or QueryCache()

    def _list(self, path: str, tag: str, key: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return self.cache.query(
            path,
            params,
            lambda: normalize_collection(self.client.get(path, params), key),
            tags=(tag,),
        )

    def _detail(self, path: str, tag: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return self.cache.query(path, params, lambda: unwrap(self.client.get(path, params)), tags=(tag,))

    def _mutate(self, method: str, path: str, tag: str, payload: Any = None) -> Any:
        response = self.client.request(method, path, json=payload)
        self.cache.invalidate(tag)
        return unwrap(response)

    # projects

    def get_projects(self, **params) -> Dict[str, Any]:
        return self._list("/projects", "projects", "projects", params)

    def get_project(self, id_or_slug) -> Any:
        return self._detail(f"/projects/{id_or_slug}", "projects")

    def get_project_stats(self) -> Any:
        return self._detail("/projects/stats", "projects")

    def create_project(self, data: Mapping[str, Any]) -> Any:
        return self._mutate("POST", "/projects", "projects", dict(data))

    def update_project(self, project_id: int, data: Mapping[str, Any]) -> Any:
        return self._mutate("PUT", f"/projects/{project_id}", "projects", dict(data))

    def delete_project(self, project_id: int) -> Any:
        return self._mutate("DELETE", f"/projects/{project_id}", "projects")

    # team

    def get_team(self, **params) -> Dict[str, Any]:
        return self._list("/team", "team", "teamMembers", params)

    def get_team_member(self, id_or_slug) -> Any:
        return self._detail(f"/team/{id_or_slug}", "team")

    def create_team_member(self, data: Mapping[str, Any]) -> Any:
        return self._mutate("POST", "/team", "team", dict(data))

    def update_team_member(self, member_id: int, data: Mapping[str, Any]) -> Any:
        return self._mutate("PUT", f"/team/{member_id}", "team", dict(data))

    def delete_team_member(self, member_id: int) -> Any:
        return self._mutate("DELETE", f"/team/{member_id}", "team")

    # blog

    def get_blog_posts(self, **params) -> Dict[str, Any]:
        return self._list("/blog", "blog", "posts", params)

    def get_blog_post(self, slug) -> Any:
        return self._detail(f"/blog/{slug}", "blog")

    def get_blog_categories(self) -> Any:
        return self._detail("/blog/categories", "blog")

    def create_blog_post(self, data: Mapping[str, Any]) -> Any:
        return self._mutate("POST", "/blog", "blog", dict(data))

    def update_blog_post(self, post_id: int, data: Mapping[str, Any]) -> Any:
        return self._mutate("PUT", f"/blog/{post_id}", "blog", dict(data))

    def delete_blog_post(self, post_id: int) -> Any:
        return self._mutate("DELETE", f"/blog/{post_id}", "blog")

    # services

    def get_services(self, **params) -> Dict[str, Any]:
        return self._list("/services", "services", "services", params)

    def get_featured_services(self) -> Dict[str, Any]:
        return self._list("/services/featured", "services", "services")

    def get_service(self, id_or_slug) -> Any:
        return self._detail(f"/services/{id_or_slug}", "services")

    def create_service(self, data: Mapping[str, Any]) -> Any:
        return self._mutate("POST", "/services", "services", dict(data))

    def update_service(self, service_id: int, data: Mapping[str, Any]) -> Any:
        return self._mutate("PUT", f"/services/{service_id}", "services", dict(data))

    def delete_service(self, service_id: int) -> Any:
        return self._mutate("DELETE", f"/services/{service_id}", "services")

    # contact

    def submit_contact(self, data: Mapping[str, Any]) -> Any:
        return self._mutate("POST", "/contact", "contacts", dict(data))

    def subscribe_newsletter(self, email: str, name: Optional[str] = None) -> Any:
        return self.client.post("/contact/newsletter", {"email": email, "name": name})

    def get_contact_submissions(self, **params) -> Dict[str, Any]:
        return self._list("/contact", "contacts", "submissions", params)

    def update_contact_status(self, submission_id: int, status: str, **extra) -> Any:
        return self._mutate("PUT", f"/contact/{submission_id}/status", "contacts", {"status": status, **extra})

    def delete_contact_submission(self, submission_id: int) -> Any:
        return self._mutate("DELETE", f"/contact/{submission_id}", "contacts")

    # company

    def get_company_info(self) -> Any:
        return self._detail("/company", "company")

    def update_company_info(self, data: Mapping[str, Any]) -> Any:
        response = self.client.put("/company", dict(data))
        self.cache.invalidate("company")
        return response
