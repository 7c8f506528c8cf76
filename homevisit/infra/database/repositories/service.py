"""Service repository."""
from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import select

from homevisit.infra.database.models.service import Service
from homevisit.infra.database.repositories.base import BaseRepository


class ServiceRepository(BaseRepository[Service]):
    model = Service

    async def get_for_tenant(self, tenant_id: UUID, service_id: UUID) -> Optional[Service]:
        """Tenant-scoped lookup; a service id from another tenant is not found."""
        stmt = (
            select(Service)
            .where(Service.id == service_id)
            .where(Service.tenant_id == tenant_id)
        )
        return await self._first(stmt)
