"""Booking repository: day-window reads for quota, occupancy and staff load."""
from __future__ import annotations

import datetime as _dt
from typing import List, Sequence
from uuid import UUID

from sqlalchemy import Select, select

from homevisit.infra.database.models.booking import Booking
from homevisit.infra.database.repositories.base import BaseRepository


class BookingRepository(BaseRepository[Booking]):
    """All ranges are half-open: start <= scheduled_at < end."""

    model = Booking

    def _home_visits(
        self,
        tenant_id: UUID,
        start: _dt.datetime,
        end: _dt.datetime,
        statuses: Sequence[str],
    ) -> Select:
        return (
            select(Booking)
            .where(Booking.tenant_id == tenant_id)
            .where(Booking.is_home_visit.is_(True))
            .where(Booking.scheduled_at >= start)
            .where(Booking.scheduled_at < end)
            .where(Booking.status.in_(list(statuses)))
        )

    def _for_staff(
        self,
        tenant_id: UUID,
        staff_id: UUID,
        start: _dt.datetime,
        end: _dt.datetime,
        statuses: Sequence[str],
    ) -> Select:
        return (
            select(Booking)
            .where(Booking.tenant_id == tenant_id)
            .where(Booking.staff_id == staff_id)
            .where(Booking.scheduled_at >= start)
            .where(Booking.scheduled_at < end)
            .where(Booking.status.in_(list(statuses)))
        )

    async def count_home_visits(
        self,
        tenant_id: UUID,
        start: _dt.datetime,
        end: _dt.datetime,
        statuses: Sequence[str],
    ) -> int:
        return await self._count(self._home_visits(tenant_id, start, end, statuses))

    async def list_home_visit_starts(
        self,
        tenant_id: UUID,
        start: _dt.datetime,
        end: _dt.datetime,
        statuses: Sequence[str],
    ) -> List[_dt.datetime]:
        stmt = self._home_visits(tenant_id, start, end, statuses).with_only_columns(
            Booking.scheduled_at
        )
        return await self._all(stmt)

    async def count_for_staff(
        self,
        tenant_id: UUID,
        staff_id: UUID,
        start: _dt.datetime,
        end: _dt.datetime,
        statuses: Sequence[str],
    ) -> int:
        return await self._count(self._for_staff(tenant_id, staff_id, start, end, statuses))

    async def count_home_visits_for_staff(
        self,
        tenant_id: UUID,
        staff_id: UUID,
        start: _dt.datetime,
        end: _dt.datetime,
        statuses: Sequence[str],
    ) -> int:
        stmt = self._for_staff(tenant_id, staff_id, start, end, statuses).where(
            Booking.is_home_visit.is_(True)
        )
        return await self._count(stmt)

    async def list_for_staff(
        self,
        tenant_id: UUID,
        staff_id: UUID,
        start: _dt.datetime,
        end: _dt.datetime,
        statuses: Sequence[str],
    ) -> List[Booking]:
        stmt = self._for_staff(tenant_id, staff_id, start, end, statuses).order_by(
            Booking.scheduled_at
        )
        return await self._all(stmt)
