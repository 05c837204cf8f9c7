from __future__ import annotations

from typing import Dict, Optional


class AgencyError(Exception):
    """Base for every error the API reports with a stable code."""

    status_code = 500
    code = "internal_error"
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "error": self.code, "message": self.message}


class InvalidCredentials(AgencyError):
    status_code = 401
    code = "invalid_credentials"
    default_message = "Invalid email or password"


class AccountInactive(AgencyError):
    status_code = 401
    code = "account_inactive"
    default_message = "Account is deactivated"


class AccountLocked(AgencyError):
    status_code = 423
    code = "account_locked"
    default_message = "Account is temporarily locked due to too many failed attempts"


class TokenExpired(AgencyError):
    status_code = 401
    code = "token_expired"
    default_message = "Access denied. Token expired."


class TokenInvalid(AgencyError):
    status_code = 401
    code = "token_invalid"
    default_message = "Access denied. Invalid token."


class PermissionDenied(AgencyError):
    status_code = 403
    code = "permission_denied"
    default_message = "Access denied. Insufficient permissions."


class NotFound(AgencyError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found"


class ValidationError(AgencyError):
    status_code = 400
    code = "validation_error"
    default_message = "Validation failed"

    def __init__(self, fields: Dict[str, str], message: Optional[str] = None) -> None:
        self.fields = dict(fields)
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["errors"] = self.fields
        return data


class RateLimited(AgencyError):
    status_code = 429
    code = "rate_limited"
    default_message = "Too many requests from this IP, please try again later."


class NetworkError(AgencyError):
    """Raised by the API client when the server cannot be reached."""

    status_code = 503
    code = "network_error"
    default_message = "Server is not responding"


ERRORS_BY_CODE = {
    cls.code: cls
    for cls in (
        InvalidCredentials,
        AccountInactive,
        AccountLocked,
        TokenExpired,
        TokenInvalid,
        PermissionDenied,
        NotFound,
        ValidationError,
        RateLimited,
        NetworkError,
    )
}
