"""
Built-in exception types. Add new ones here or via exception_factory().
"""
from __future__ import annotations

from homevisit.core.exceptions.base import ProjectError


class ConfigurationError(ProjectError):
    """Invalid or missing configuration."""

    default_code = "CONFIGURATION_ERROR"
    default_http_status = 500


class ValidationError(ProjectError):
    """Request or input validation failed."""

    default_code = "VALIDATION_ERROR"
    default_http_status = 400


class NotFoundError(ProjectError):
    """Requested resource not found."""

    default_code = "NOT_FOUND"
    default_http_status = 404


class TenantNotFoundError(NotFoundError):
    """No tenant matches the given UUID or subdomain."""

    default_code = "TENANT_NOT_FOUND"


class ServiceNotFoundError(NotFoundError):
    """Service does not exist or belongs to another tenant."""

    default_code = "SERVICE_NOT_FOUND"


class ConflictError(ProjectError):
    """Resource state conflict (e.g. duplicate, version mismatch)."""

    default_code = "CONFLICT"
    default_http_status = 409


class StaffUnavailableError(ConflictError):
    """No qualified staff member can take the requested slot."""

    default_code = "STAFF_UNAVAILABLE"


class ExternalServiceError(ProjectError):
    """Data store or another dependency failed."""

    default_code = "EXTERNAL_SERVICE_ERROR"
    default_http_status = 502
