"""BlockedDate repository: coarse range prefilter; recurrence is resolved in Python."""
from __future__ import annotations

import datetime as _dt
from typing import List
from uuid import UUID

from sqlalchemy import func, or_, select

from homevisit.infra.database.models.blocked_date import BlockedDate
from homevisit.infra.database.repositories.base import BaseRepository


class BlockedDateRepository(BaseRepository[BlockedDate]):
    model = BlockedDate

    async def list_candidates(
        self,
        tenant_id: UUID,
        start: _dt.date,
        end: _dt.date,
    ) -> List[BlockedDate]:
        """Rows that may cover some day in [start, end]: one-off ranges that
        overlap it, plus every recurring row that began on or before end."""
        stmt = (
            select(BlockedDate)
            .where(BlockedDate.tenant_id == tenant_id)
            .where(BlockedDate.date_start <= end)
            .where(
                or_(
                    BlockedDate.recurring_pattern.is_not(None),
                    func.coalesce(BlockedDate.date_end, BlockedDate.date_start) >= start,
                )
            )
            .order_by(BlockedDate.date_start)
        )
        return await self._all(stmt)
