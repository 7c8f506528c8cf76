"""
Project exception system.

Usage:
    from homevisit.core.exceptions import ProjectError, ValidationError, exception_factory

    # Built-in types
    raise ValidationError("date must be YYYY-MM-DD", details={"field": "date"})

    # Add new type on demand
    QuotaError = exception_factory("QuotaError", code="QUOTA_ERROR", http_status=500)
    raise QuotaError("Failed to count bookings", cause=original_error)
"""
from homevisit.core.exceptions.base import ProjectError, exception_factory
from homevisit.core.exceptions.errors import (
    ConfigurationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ServiceNotFoundError,
    StaffUnavailableError,
    TenantNotFoundError,
    ValidationError,
)

__all__ = [
    "ProjectError",
    "exception_factory",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "TenantNotFoundError",
    "ServiceNotFoundError",
    "ConflictError",
    "StaffUnavailableError",
    "ExternalServiceError",
]
