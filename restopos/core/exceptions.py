"""
Service Error Taxonomy

Every service operation either returns its payload or raises one of
these errors. The FastAPI handlers in ``restopos.middleware`` turn them into the
``{"success": false, "message": ...}`` envelope with ``http_status``.
"""

from typing import Any, Mapping, Optional


class ServiceError(Exception):
    """Base class for failures a service reports to its caller.

    Attributes:
        message: human-readable message shown to the user
        details: optional mapping with extra context (field errors, ids)
        code: machine-readable error code
        http_status: HTTP status code used by the API handlers
    """

    http_status = 400
    default_message = "Request failed"
    default_code = "SERVICE_ERROR"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
        code: Optional[str] = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.details = details
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {
            "success": False,
            "message": self.message,
            "code": self.code,
        }
        if self.details:
            payload["details"] = dict(self.details)
        return payload

    def __str__(self) -> str:
        return self.message


class ValidationFailed(ServiceError):
    """Input data is invalid or a precondition is not met."""

    http_status = 400
    default_message = "Invalid input"
    default_code = "VALIDATION_ERROR"


class AuthenticationFailed(ServiceError):
    """Credentials or session token were rejected."""

    http_status = 401
    default_message = "Authentication required"
    default_code = "UNAUTHORIZED"


class PermissionDenied(ServiceError):
    """The caller is known but not allowed to do this."""

    http_status = 403
    default_message = "Not allowed"
    default_code = "FORBIDDEN"


class NotFound(ServiceError):
    """A requested resource does not exist (or is not visible to the caller)."""

    http_status = 404
    default_message = "Not found"
    default_code = "NOT_FOUND"


class Conflict(ServiceError):
    """The change would duplicate an existing resource."""

    http_status = 409
    default_message = "Conflict"
    default_code = "CONFLICT"
