"""BestStaffSelector: the least-loaded staff member free for a slot."""
from __future__ import annotations

import datetime as _dt
import logging
from typing import Optional
from uuid import UUID

from homevisit.config import AvailabilityConfig
from homevisit.core.exceptions import ValidationError
from homevisit.services.availability_service import AvailabilityService
from homevisit.services.gateway import BaseConstraintGateway
from homevisit.services.types import StaffInfo

logger = logging.getLogger(__name__)


class BestStaffSelector:
    def __init__(
        self,
        gateway: BaseConstraintGateway,
        config: Optional[AvailabilityConfig] = None,
        availability: Optional[AvailabilityService] = None,
    ) -> None:
        self._gateway = gateway
        self._availability = availability or AvailabilityService(gateway, config)

    async def select_best(
        self,
        tenant_id: UUID,
        service_id: UUID,
        day: _dt.date,
        slot_start: _dt.datetime,
        slot_end: _dt.datetime,
    ) -> Optional[StaffInfo]:
        """Lowest confirmed-booking load wins; ties go to the earlier staff in listing order.

        Degraded checks never win. None when nobody qualifies or nobody is free.
        """
        if slot_end <= slot_start:
            raise ValidationError(
                "slot end must be after slot start",
                details={"start": slot_start.isoformat(), "end": slot_end.isoformat()},
            )
        ctx = {"tenant_id": str(tenant_id), "service_id": str(service_id), "date": day.isoformat()}
        service = await self._availability.require_service(tenant_id, service_id)
        staff = await self._gateway.get_staff_for_service(tenant_id, service.id)
        if not staff:
            logger.info("No qualified staff for service", extra=ctx)
            return None

        duration = int((slot_end - slot_start).total_seconds() // 60)
        fallback = await self._availability.evaluator.fallback_hours(tenant_id, day)
        checks = await self._availability.check_staff(
            tenant_id, staff, day, slot_start, duration, service.travel_buffer_minutes, fallback
        )
        free = [c for c in checks if c.is_available]
        if not free:
            logger.info("No staff available at %s", slot_start.isoformat(), extra=ctx)
            return None
        # min() keeps the first of equal loads
        best = min(free, key=lambda c: c.booking_load)
        logger.info(
            "Selected %s (load %d) at %s", best.staff.name, best.booking_load, slot_start.isoformat(),
            extra={**ctx, "staff_id": str(best.staff.id)},
        )
        return best.staff
