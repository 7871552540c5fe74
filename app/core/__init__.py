"""
Core Application - Infrastructure & Base Classes

Generic infrastructure shared by the domain apps. No messaging logic lives
here.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - AuthenticationRequiredError: No verified principal
    - PermissionDeniedError: Authorization failures
    - ValidationError: Input validation failures
    - NotFoundError: Resource not found
    - StorageFailureError: Persistence failures

Exception handling (configured as DRF's EXCEPTION_HANDLER):
    - core.exception_handlers.api_exception_handler

Note:
    Django models are NOT imported here to avoid AppRegistryNotReady
    errors. Import them directly from their modules.
"""

from .exceptions import (
    AuthenticationRequiredError,
    BaseApplicationError,
    NotFoundError,
    PermissionDeniedError,
    StorageFailureError,
    ValidationError,
)
from .services import BaseService, ServiceResult

__all__ = [
    # Services
    "BaseService",
    "ServiceResult",
    # Exceptions
    "BaseApplicationError",
    "AuthenticationRequiredError",
    "PermissionDeniedError",
    "ValidationError",
    "NotFoundError",
    "StorageFailureError",
]
