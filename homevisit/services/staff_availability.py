"""StaffAvailabilityEvaluator: can this staff member take this slot, and how busy are they?

evaluate() answers from the gateway and lets backend errors propagate.
check() is what the composer and selector call: it bounds evaluate() with a
timeout and turns a timeout or backend error into a DEGRADED result instead
of failing the whole request.
"""
from __future__ import annotations

import asyncio
import datetime as _dt
import logging
from typing import Optional
from uuid import UUID

from homevisit.config import AvailabilityConfig
from homevisit.core.exceptions import ProjectError
from homevisit.services.gateway import BaseConstraintGateway, parse_hhmm
from homevisit.services.types import (
    ACTIVE_STATUSES,
    LOAD_STATUSES,
    CheckOutcome,
    DayOfWeek,
    StaffCheck,
    StaffEvaluation,
    StaffInfo,
    UnavailableReason,
    WorkingHours,
)

logger = logging.getLogger(__name__)


class StaffAvailabilityEvaluator:
    def __init__(
        self,
        gateway: BaseConstraintGateway,
        config: Optional[AvailabilityConfig] = None,
    ) -> None:
        self._gateway = gateway
        self._config = config or AvailabilityConfig()

    @property
    def default_hours(self) -> WorkingHours:
        return WorkingHours(
            start=parse_hhmm(self._config.default_work_start),
            end=parse_hhmm(self._config.default_work_end),
        )

    async def fallback_hours(self, tenant_id: UUID, day: _dt.date) -> WorkingHours:
        """Tenant business hours for the weekday, else the configured default."""
        hours = await self._gateway.get_business_hours(tenant_id, DayOfWeek.of(day))
        return hours or self.default_hours

    async def evaluate(
        self,
        tenant_id: UUID,
        staff: StaffInfo,
        day: _dt.date,
        slot_start: _dt.datetime,
        slot_duration: int,
        travel_buffer_minutes: int = 0,
        fallback_hours: Optional[WorkingHours] = None,
    ) -> StaffEvaluation:
        """
        0. Staff who opted out of home visits are never available.
        1. On leave that day → unavailable.
        2. Working hours (custom schedule → fallback_hours → default) must
           contain [slot_start, slot_start + duration + travel buffer].
        3. No pending/confirmed booking of theirs may overlap the slot
           widened by the travel buffer on both sides.
        4. Their pending/confirmed home visits that day must be under their
           own cap (or the configured per-staff default).
        5. Available; booking_load = confirmed bookings that day.
        """
        if not staff.can_do_home_visit:
            return StaffEvaluation(is_available=False, reason=UnavailableReason.NO_HOME_VISITS)

        if await self._gateway.is_staff_on_leave(staff.id, day):
            return StaffEvaluation(is_available=False, reason=UnavailableReason.ON_LEAVE)

        hours = await self._gateway.get_staff_working_hours(
            staff.id, DayOfWeek.of(day), fallback_hours or self.default_hours
        )
        if not hours.available:
            return StaffEvaluation(is_available=False, reason=UnavailableReason.NOT_WORKING)

        buffer = _dt.timedelta(minutes=travel_buffer_minutes)
        service_end = slot_start + _dt.timedelta(minutes=slot_duration)
        tz = slot_start.tzinfo
        window_start = _dt.datetime.combine(day, hours.start, tzinfo=tz)
        window_end = _dt.datetime.combine(day, hours.end, tzinfo=tz)
        if slot_start < window_start or service_end + buffer > window_end:
            return StaffEvaluation(is_available=False, reason=UnavailableReason.OUTSIDE_HOURS)

        busy_from, busy_to = slot_start - buffer, service_end + buffer
        existing = await self._gateway.list_staff_bookings(tenant_id, staff.id, day, ACTIVE_STATUSES)
        if any(b.start < busy_to and b.end > busy_from for b in existing):
            return StaffEvaluation(is_available=False, reason=UnavailableReason.CONFLICT)

        cap = staff.max_daily_home_visits or self._config.default_max_daily_home_visits_per_staff
        visits = await self._gateway.count_staff_home_visits(tenant_id, staff.id, day, ACTIVE_STATUSES)
        if visits >= cap:
            return StaffEvaluation(is_available=False, reason=UnavailableReason.HOME_VISIT_CAP)

        load = await self._gateway.count_staff_bookings(tenant_id, staff.id, day, LOAD_STATUSES)
        return StaffEvaluation(is_available=True, booking_load=load)

    async def check(
        self,
        tenant_id: UUID,
        staff: StaffInfo,
        day: _dt.date,
        slot_start: _dt.datetime,
        slot_duration: int,
        travel_buffer_minutes: int = 0,
        fallback_hours: Optional[WorkingHours] = None,
    ) -> StaffCheck:
        try:
            result = await asyncio.wait_for(
                self.evaluate(
                    tenant_id, staff, day, slot_start, slot_duration,
                    travel_buffer_minutes, fallback_hours,
                ),
                timeout=self._config.staff_check_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Staff check timed out for %s at %s",
                staff.name, slot_start.isoformat(),
                extra={"tenant_id": str(tenant_id), "staff_id": str(staff.id), "date": day.isoformat()},
            )
            return StaffCheck(staff=staff, outcome=CheckOutcome.DEGRADED, reason=UnavailableReason.TIMEOUT)
        except ProjectError as exc:
            logger.warning(
                "Staff check failed for %s at %s: %s",
                staff.name, slot_start.isoformat(), exc,
                extra={"tenant_id": str(tenant_id), "staff_id": str(staff.id), "date": day.isoformat()},
            )
            return StaffCheck(staff=staff, outcome=CheckOutcome.DEGRADED, reason=UnavailableReason.ERROR)

        if result.is_available:
            return StaffCheck(staff=staff, outcome=CheckOutcome.AVAILABLE, booking_load=result.booking_load)
        return StaffCheck(staff=staff, outcome=CheckOutcome.UNAVAILABLE, reason=result.reason)
