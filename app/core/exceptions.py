"""
Application exception hierarchy.

Every failure the messaging API reports maps to one of these classes, each
carrying a machine-readable error code and the HTTP status it is served with:

    BaseApplicationError (base)
    ├── AuthenticationRequiredError - no verified principal (401)
    ├── PermissionDeniedError - principal is not allowed (403)
    ├── ValidationError - malformed or rejected input (400)
    ├── NotFoundError - resource does not exist (404)
    └── StorageFailureError - persistence failed (500)

Usage:
    from core.exceptions import PermissionDeniedError

    raise PermissionDeniedError("Not a participant", error_code="NOT_PARTICIPANT")

    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=e.status_code)

Note:
    Server code mostly reports expected failures as ServiceResult values.
    These exceptions are raised by the HTTP client package and translated
    into responses by core.exception_handlers on the server.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to the API error body.

        Example:
            {"error": "Not a participant", "error_code": "NOT_PARTICIPANT"}
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class AuthenticationRequiredError(BaseApplicationError):
    """Raised when a request carries no valid session token."""

    default_error_code: str = "UNAUTHENTICATED"
    status_code: int = 401


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when an authenticated user may not act on a resource.

    Conversations answer with this error for non-members whether or not
    the conversation exists, so it never confirms existence.
    """

    default_error_code: str = "FORBIDDEN"
    status_code: int = 403


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Example:
        raise ValidationError(
            "Message content cannot be empty",
            error_code="EMPTY_CONTENT",
            details={"content": ["This field may not be blank."]},
        )
    """

    default_error_code: str = "VALIDATION_ERROR"
    status_code: int = 400


class NotFoundError(BaseApplicationError):
    """Raised when a requested resource is not found."""

    default_error_code: str = "NOT_FOUND"
    status_code: int = 404


class StorageFailureError(BaseApplicationError):
    """
    Raised when the store (or the server behind the API) fails.

    The message shown to clients is generic; the original error is logged
    where it is caught.
    """

    default_error_code: str = "INTERNAL_FAILURE"
    status_code: int = 500
