from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config import settings
from ..errors import (
    ERRORS_BY_CODE,
    AccountLocked,
    AgencyError,
    NetworkError,
    NotFound,
    PermissionDenied,
    RateLimited,
    TokenInvalid,
    ValidationError,
)
from .storage import TokenStorage


logger = logging.getLogger(__name__)

LOGIN_PATH = "/admin/login"
_STATUS_ERRORS = {401: TokenInvalid, 403: PermissionDenied, 404: NotFound, 423: AccountLocked, 429: RateLimited}


def error_from_response(status_code: int, body: Any) -> AgencyError:
    body = body if isinstance(body, dict) else {}
    message = body.get("message") or body.get("error")
    cls = ERRORS_BY_CODE.get(body.get("error") or "")
    if cls is None and status_code in (400, 422):
        cls = ValidationError
    if cls is None:
        cls = _STATUS_ERRORS.get(status_code)
    if cls is ValidationError:
        return ValidationError(body.get("errors") or {}, message)
    if cls is None:
        exc = AgencyError(message or f"Request failed with status {status_code}")
        exc.status_code = status_code
        return exc
    return cls(message)


class ApiClient:
    """httpx wrapper for the content API.

    Attaches the stored bearer token, turns error responses into the error
    taxonomy and retries transport failures ``retries`` extra times. A 401
    drops the stored token and reports a redirect to the login route.
    """

    def __init__(
        self,
        base_url: str | None = None,
        storage: TokenStorage | None = None,
        timeout: float | None = None,
        retries: int | None = None,
        retry_wait: float = 1.0,
        transport: httpx.BaseTransport | None = None,
        on_unauthorized: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.storage = storage or TokenStorage()
        self.retries = settings.API_RETRY_COUNT if retries is None else retries
        self.retry_wait = retry_wait
        self.on_unauthorized = on_unauthorized
        self.redirect_to: Optional[str] = None
        self.client = httpx.Client(
            base_url=(base_url or settings.API_BASE_URL).rstrip("/"),
            timeout=httpx.Timeout(timeout or settings.API_TIMEOUT_SECONDS),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _headers(self) -> Dict[str, str]:
        token = self.storage.read()
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _send(self, method: str, path: str, params: Optional[Mapping[str, Any]], json: Any) -> httpx.Response:
        clean = {k: v for k, v in (params or {}).items() if v is not None}
        try:
            return self.client.request(method, path, params=clean, json=json, headers=self._headers())
        except httpx.TransportError as exc:
            logger.warning("api transport error %s %s: %s", method, path, exc)
            raise NetworkError() from exc

    def _handle_unauthorized(self, path: str) -> None:
        self.storage.clear(also=("apiKey",))
        if path.rstrip("/").endswith("/auth/login"):
            return
        self.redirect_to = LOGIN_PATH
        if self.on_unauthorized is not None:
            self.on_unauthorized(LOGIN_PATH)

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        retrying = Retrying(
            retry=retry_if_exception_type(NetworkError),
            stop=stop_after_attempt(self.retries + 1),
            wait=wait_exponential(multiplier=self.retry_wait, max=8),
            reraise=True,
        )
        response = retrying(self._send, method, path, params, json)
        try:
            body = response.json() if response.content else None
        except ValueError:
            body = None
        if response.status_code >= 400:
            if response.status_code == 401:
                self._handle_unauthorized(path)
            raise error_from_response(response.status_code, body)
        return body

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)
