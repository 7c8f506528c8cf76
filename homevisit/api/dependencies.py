"""FastAPI dependency providers."""
from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, Query, Request

from homevisit.config import AvailabilityConfig
from homevisit.core.exceptions import ConfigurationError, TenantNotFoundError, ValidationError
from homevisit.services import AvailabilityService, BestStaffSelector, SqlConstraintGateway
from homevisit.services.gateway import BaseConstraintGateway


def get_availability_config(request: Request) -> AvailabilityConfig:
    return getattr(request.app.state, "availability_config", None) or AvailabilityConfig()


def get_gateway(
    request: Request,
    config: AvailabilityConfig = Depends(get_availability_config),
) -> BaseConstraintGateway:
    """One gateway per request over the app-level session factory."""
    session_factory = getattr(request.app.state, "session_factory", None)
    if session_factory is None:
        raise ConfigurationError("Database not initialised. Check server startup logs.")
    return SqlConstraintGateway(session_factory, config)


def get_availability_service(
    gateway: BaseConstraintGateway = Depends(get_gateway),
    config: AvailabilityConfig = Depends(get_availability_config),
) -> AvailabilityService:
    return AvailabilityService(gateway, config)


def get_staff_selector(
    gateway: BaseConstraintGateway = Depends(get_gateway),
    availability: AvailabilityService = Depends(get_availability_service),
) -> BestStaffSelector:
    return BestStaffSelector(gateway, availability=availability)


async def get_tenant_id(
    gateway: BaseConstraintGateway = Depends(get_gateway),
    x_tenant_id: Optional[str] = Header(None, alias="X-Tenant-Id"),
    tenant_id: Optional[str] = Query(None, alias="tenantId"),
) -> UUID:
    """Tenant from the X-Tenant-Id header or ?tenantId= (UUID or subdomain)."""
    identifier = (x_tenant_id or tenant_id or "").strip()
    if not identifier:
        raise ValidationError("Tenant ID is required", details={"field": "tenantId"})
    tenant = await gateway.resolve_tenant(identifier)
    if tenant is None:
        raise TenantNotFoundError("Tenant not found", details={"tenantId": identifier})
    return tenant.id
