"""
DRF exception handler producing the API's error body.

Every error leaves the API as {"error": str, "error_code": str} (plus
"details" for field errors), whatever raised it:

    NotAuthenticated / AuthenticationFailed -> 401 UNAUTHENTICATED
    PermissionDenied                        -> 403 FORBIDDEN
    DRF ValidationError / ParseError        -> 400 VALIDATION_ERROR
    core.exceptions.BaseApplicationError    -> its own status and code
    django.db.DatabaseError                 -> 500 INTERNAL_FAILURE

Configured in settings:
    REST_FRAMEWORK = {"EXCEPTION_HANDLER": "core.exception_handlers.api_exception_handler"}
"""

from __future__ import annotations

import logging

from django.db import DatabaseError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import BaseApplicationError, StorageFailureError

logger = logging.getLogger(__name__)

DRF_ERROR_CODES = {
    exceptions.NotAuthenticated: "UNAUTHENTICATED",
    exceptions.AuthenticationFailed: "UNAUTHENTICATED",
    exceptions.PermissionDenied: "FORBIDDEN",
    exceptions.ValidationError: "VALIDATION_ERROR",
    exceptions.ParseError: "VALIDATION_ERROR",
    exceptions.NotFound: "NOT_FOUND",
    exceptions.MethodNotAllowed: "METHOD_NOT_ALLOWED",
    exceptions.Throttled: "THROTTLED",
}


def _error_code_for(exc: exceptions.APIException) -> str:
    for exc_class, error_code in DRF_ERROR_CODES.items():
        if isinstance(exc, exc_class):
            return error_code
    return str(exc.default_code).upper()


def api_exception_handler(exc, context):
    """
    Convert an exception raised in a view into an error Response.

    Returns None for exceptions it does not recognise so Django's own
    500 handling (and test client re-raising) still applies.
    """
    if isinstance(exc, BaseApplicationError):
        return Response(exc.to_dict(), status=exc.status_code)

    if isinstance(exc, DatabaseError):
        view = context.get("view")
        logger.exception(f"Storage failure in {view.__class__.__name__ if view else 'unknown view'}")
        failure = StorageFailureError("Internal server error")
        return Response(failure.to_dict(), status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    response = exception_handler(exc, context)
    if response is None:
        return None

    error_code = _error_code_for(exc)
    if isinstance(exc, exceptions.ValidationError):
        detail = exc.detail if isinstance(exc.detail, dict) else {"non_field_errors": exc.detail}
        response.data = {
            "error": "Invalid input",
            "error_code": error_code,
            "details": detail,
        }
    else:
        response.data = {
            "error": str(exc.detail),
            "error_code": error_code,
        }
    return response
