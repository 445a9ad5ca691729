"""
CatAPI Backend — Custom Exception Hierarchy
============================================

What:  Application-specific exceptions, one per error kind the API reports.
How:   Each exception carries a user-facing message and an optional context
       dict. The global handlers registered in main.py read `status_code` and
       `error_code` from the class and render the JSON error envelope.
Who:   Raised by services, security helpers and route dependencies.

Exception Hierarchy:
    CatApiError (base)            → 500
    ├── ValidationError           → 400 Bad Request
    ├── AuthenticationError       → 401 Unauthorized
    ├── ForbiddenError            → 403 Forbidden
    ├── NotFoundError             → 404 Not Found
    ├── ConflictError             → 409 Conflict
    ├── GeocodingError            → 502 Bad Gateway
    ├── FileStorageError          → 500 Internal Server Error
    └── InternalError             → 500 Internal Server Error
"""

from typing import Any, Dict, Iterable, Mapping, Optional


class CatApiError(Exception):
    """
    Base exception for all CatAPI application errors.

    Attributes:
        message:  User-facing error description (returned in the API response)
        context:  Additional debug info (logged, never returned to the client)
    """

    status_code: int = 500
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CatApiError):
    """
    Raised when client input fails validation.

    The message follows the `"<msg>: <field>"` convention so that single
    field errors read the same as aggregated request validation errors.
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(CatApiError):
    """No usable credentials: missing or invalid bearer token, bad login."""

    status_code = 401
    error_code = "authentication_error"

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(CatApiError):
    """
    Raised when an authorization check denies the principal.

    Admin-only and owner-only operations always fail with this error instead
    of returning an empty response.
    """

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(CatApiError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that None into
    this exception so the handler can answer with 404.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message or f"No {resource} found", context=ctx)


class ConflictError(CatApiError):
    """Raised when a write would break a uniqueness rule (e.g. email taken)."""

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class GeocodingError(CatApiError):
    """
    Raised when the geocoding provider cannot be reached or answers with an
    error status. An address that simply has no match is a ValidationError.
    """

    status_code = 502
    error_code = "geocoding_error"

    def __init__(
        self,
        message: str = "Location service is temporarily unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(CatApiError):
    """Raised when reading or writing an uploaded file fails on disk."""

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InternalError(CatApiError):
    """
    Catch-all for failures that are not one of the kinds above.

    Services wrap database and other unexpected exceptions in this error.
    The original exception type is kept in `context` for the server log.
    """

    status_code = 500
    error_code = "internal_error"

    def __init__(
        self,
        message: str = "An internal error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


def format_field_errors(errors: Iterable[Mapping[str, Any]]) -> str:
    """
    Join field errors into a single `"<msg>: <field>, <msg>: <field>"` message.

    Accepts the error dicts produced by pydantic (`loc`/`msg` keys). The
    request section of `loc` ("body", "query", "path", "form") is dropped.
    """
    parts = []
    for error in errors:
        loc = [str(item) for item in error.get("loc", ())]
        if loc and loc[0] in {"body", "query", "path", "header", "cookie", "form"}:
            loc = loc[1:]
        field = ".".join(loc) or "request"
        parts.append(f"{error.get('msg', 'Invalid value')}: {field}")
    return ", ".join(parts)
