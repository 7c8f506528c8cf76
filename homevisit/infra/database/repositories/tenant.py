"""Tenant repository: resolve by id/subdomain, read business hours."""
from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import select

from homevisit.infra.database.models.tenant import BusinessHours, Tenant
from homevisit.infra.database.repositories.base import BaseRepository


class TenantRepository(BaseRepository[Tenant]):
    model = Tenant

    async def get_by_subdomain(self, subdomain: str) -> Optional[Tenant]:
        stmt = select(Tenant).where(Tenant.subdomain == subdomain.strip().lower())
        return await self._first(stmt)

    async def get_business_hours(self, tenant_id: UUID) -> Optional[BusinessHours]:
        stmt = select(BusinessHours).where(BusinessHours.tenant_id == tenant_id)
        return await self._first(stmt)
