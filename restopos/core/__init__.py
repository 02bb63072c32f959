"""
Core module initialization.
Exports configuration and the service error taxonomy.
"""

from restopos.core.config import get_settings, Settings, EnvironmentMode
from restopos.core.exceptions import (
    ServiceError,
    ValidationFailed,
    AuthenticationFailed,
    PermissionDenied,
    NotFound,
    Conflict,
)

__all__ = [
    "get_settings",
    "Settings",
    "EnvironmentMode",
    "ServiceError",
    "ValidationFailed",
    "AuthenticationFailed",
    "PermissionDenied",
    "NotFound",
    "Conflict",
]
