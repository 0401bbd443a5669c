# moviemeter/core/exceptions.py
from __future__ import annotations

"""
MovieMeter: Application Exceptions
===================================
A small, consistent layer on top of FastAPI/Starlette's `HTTPException`.
Stores and services raise these typed failures; the handlers in
`moviemeter.core.exception_handlers` turn them into problem+json bodies.

Taxonomy
--------
| Exception            | HTTP | code                  |
|----------------------|------|-----------------------|
| ValidationFailed     | 400  | validation_error      |
| DuplicateEmail       | 400  | duplicate_email       |
| DuplicateReview      | 400  | duplicate_review      |
| Unauthenticated      | 401  | unauthenticated       |
| InvalidCredentials   | 401  | invalid_credentials   |
| InvalidToken         | 401  | invalid_token         |
| ExpiredToken         | 401  | token_expired         |
| Forbidden            | 403  | forbidden             |
| NotFound             | 404  | not_found             |
| ConfigurationFault   | 500  | configuration_error   |

Usage
-----
    raise Forbidden("Not authorized to update this review")
    raise AppException(status_code=409, message="Conflict", code="conflict")
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

__all__ = [
    "AppException",
    "ValidationFailed",
    "DuplicateEmail",
    "DuplicateReview",
    "Unauthenticated",
    "InvalidCredentials",
    "InvalidToken",
    "ExpiredToken",
    "Forbidden",
    "NotFound",
    "PayloadTooLarge",
    "ConfigurationFault",
]


# ──────────────────────────────────────────────────────────────
# 📦 Core: AppException
# ──────────────────────────────────────────────────────────────
class AppException(HTTPException):
    """Base application-level exception with optional metadata.

    Attributes
    -----------
    status_code : int
        HTTP status code.
    message : str
        Human-readable error message (serialized as `detail` as well).
    code : str
        Stable machine-readable error kind (e.g. ``duplicate_review``).
    details : dict | list | str | None
        Machine-readable details (e.g., field names).
    headers : dict | None
        Optional headers (e.g., `{"WWW-Authenticate": "Bearer"}`).
    """

    default_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: str = "error"
    default_message: str = "Request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        message = message or self.default_message
        super().__init__(status_code=status_code or self.default_status, detail=message, headers=headers)
        self.message: str = message
        self.code: str = code or self.default_code
        self.details: Optional[Any] = details

    @property
    def title(self) -> str:
        return self.__class__.__name__

    def to_problem(self, *, instance: str = "", request_id: Optional[str] = None) -> Dict[str, Any]:
        """Return a dict matching our problem+json shape."""
        body: Dict[str, Any] = {
            "type": "about:blank",
            "title": self.title,
            "detail": self.message,
            "status": self.status_code,
            "instance": instance,
            "code": self.code,
            "request_id": request_id or "N/A",
        }
        if self.details is not None:
            body["details"] = self.details
        return body

    def __str__(self) -> str:
        return self.message


# ──────────────────────────────────────────────────────────────
# 🧾 Input / uniqueness
# ──────────────────────────────────────────────────────────────
class ValidationFailed(AppException):
    """Malformed or missing input."""

    default_status = status.HTTP_400_BAD_REQUEST
    default_code = "validation_error"
    default_message = "Validation failed"


class DuplicateEmail(AppException):
    """An account with this email already exists."""

    default_status = status.HTTP_400_BAD_REQUEST
    default_code = "duplicate_email"
    default_message = "User already exists with this email"


class DuplicateReview(AppException):
    """The (user, movie) pair already has a review."""

    default_status = status.HTTP_400_BAD_REQUEST
    default_code = "duplicate_review"
    default_message = "You have already reviewed this movie"


# ──────────────────────────────────────────────────────────────
# 🔑 Auth / token
# ──────────────────────────────────────────────────────────────
class Unauthenticated(AppException):
    """Missing, invalid or expired identity (401 + `WWW-Authenticate`)."""

    default_status = status.HTTP_401_UNAUTHORIZED
    default_code = "unauthenticated"
    default_message = "Authentication required"

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None, **kwargs: Any) -> None:
        kwargs.setdefault("headers", {"WWW-Authenticate": "Bearer"})
        super().__init__(message, code=code, **kwargs)


class InvalidCredentials(Unauthenticated):
    """Unknown email or wrong password (neutral message)."""

    default_code = "invalid_credentials"
    default_message = "Invalid credentials"


class InvalidToken(Unauthenticated):
    """Signature mismatch, malformed token, or missing subject."""

    default_code = "invalid_token"
    default_message = "Invalid token"


class ExpiredToken(Unauthenticated):
    """Token is past its `exp` claim."""

    default_code = "token_expired"
    default_message = "Token expired"


class Forbidden(AppException):
    """Authenticated, but not the owner of the resource."""

    default_status = status.HTTP_403_FORBIDDEN
    default_code = "forbidden"
    default_message = "Forbidden"


class NotFound(AppException):
    """Resource id does not exist."""

    default_status = status.HTTP_404_NOT_FOUND
    default_code = "not_found"
    default_message = "Not found"


class PayloadTooLarge(AppException):
    """Request body above the configured `MAX_BODY_BYTES`."""

    default_status = 413
    default_code = "payload_too_large"
    default_message = "Request body is too large. Please reduce the size of your request."


# ──────────────────────────────────────────────────────────────
# ⚙️ Server-side faults
# ──────────────────────────────────────────────────────────────
class ConfigurationFault(AppException):
    """Server misconfiguration (e.g. missing JWT secret). Never a client error."""

    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "configuration_error"
    default_message = "Server configuration error"
