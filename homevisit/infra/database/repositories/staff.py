"""Staff repository: qualified staff, leave and weekly schedule lookups."""
from __future__ import annotations

import datetime as _dt
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import and_, or_, select

from homevisit.infra.database.models.staff import Staff, StaffLeave, StaffSchedule, StaffService
from homevisit.infra.database.repositories.base import BaseRepository


class StaffRepository(BaseRepository[Staff]):
    model = Staff

    async def list_qualified(
        self,
        tenant_id: UUID,
        service_id: UUID,
        *,
        include_unmapped: bool,
    ) -> List[Tuple[Staff, bool]]:
        """Active tenant staff able to perform service_id, with their specialist flag.

        A staff_services row decides when present (can_perform). Staff with
        no row are included only when include_unmapped is set. Ordered by
        creation then name so ranking ties resolve the same way every time.
        """
        mapped = and_(StaffService.id.is_not(None), StaffService.can_perform.is_(True))
        qualified = or_(mapped, StaffService.id.is_(None)) if include_unmapped else mapped
        stmt = (
            select(Staff, StaffService.is_specialist)
            .outerjoin(
                StaffService,
                and_(
                    StaffService.staff_id == Staff.id,
                    StaffService.service_id == service_id,
                ),
            )
            .where(Staff.tenant_id == tenant_id)
            .where(Staff.is_active.is_(True))
            .where(qualified)
            .order_by(Staff.created_at, Staff.name, Staff.id)
        )
        result = await self.session.execute(stmt)
        return [(staff, bool(specialist)) for staff, specialist in result.all()]

    async def has_leave_on(self, staff_id: UUID, day: _dt.date) -> bool:
        stmt = (
            select(StaffLeave.id)
            .where(StaffLeave.staff_id == staff_id)
            .where(StaffLeave.date_start <= day)
            .where(StaffLeave.date_end >= day)
        )
        return await self._first(stmt) is not None

    async def get_schedule(self, staff_id: UUID, day_of_week: int) -> Optional[StaffSchedule]:
        stmt = (
            select(StaffSchedule)
            .where(StaffSchedule.staff_id == staff_id)
            .where(StaffSchedule.day_of_week == day_of_week)
        )
        return await self._first(stmt)
