"""AvailabilityService: home-visit slots for a service on a date.

Gates, in order, each able to end the request:
  0. service exists (else ServiceNotFoundError) and offers home visits
  1. home visits enabled for the tenant
  2. date not blocked
  3. quota (tenant-wide, all services)
  4. per slot: not already taken, quota left, and, when the service needs a
     staff member, at least one qualified staff member free for it
  5. summary message
"""
from __future__ import annotations

import asyncio
import datetime as _dt
import logging
from typing import List, Optional, Sequence
from uuid import UUID
from zoneinfo import ZoneInfo

from homevisit.config import AvailabilityConfig
from homevisit.config.availability import is_hhmm
from homevisit.core.exceptions import (
    ExternalServiceError,
    ServiceNotFoundError,
    TenantNotFoundError,
    ValidationError,
)
from homevisit.services.gateway import BaseConstraintGateway, parse_hhmm, zone_for
from homevisit.services.slot_quota import SlotQuotaTracker
from homevisit.services.staff_availability import StaffAvailabilityEvaluator
from homevisit.services.types import (
    AvailabilityResult,
    CheckOutcome,
    ServiceInfo,
    SlotResult,
    StaffCheck,
    StaffInfo,
    WorkingHours,
)

logger = logging.getLogger(__name__)

MSG_UNSUPPORTED = "Home visit is not available for this service"
MSG_BLOCKED = "This date is blocked"
MSG_FULLY_BOOKED = "All home visit slots are fully booked for this date"
MSG_NO_STAFF = "No staff available for this date"


def slots_available_message(count: int) -> str:
    return f"{count} slot(s) available"


class AvailabilityService:
    def __init__(
        self,
        gateway: BaseConstraintGateway,
        config: Optional[AvailabilityConfig] = None,
    ) -> None:
        self._gateway = gateway
        self._config = config or AvailabilityConfig()
        self._evaluator = StaffAvailabilityEvaluator(gateway, self._config)
        self._quota = SlotQuotaTracker(gateway, self._config)

    @property
    def evaluator(self) -> StaffAvailabilityEvaluator:
        return self._evaluator

    async def get_available_slots(
        self, tenant_id: UUID, service_id: UUID, day: _dt.date
    ) -> AvailabilityResult:
        ctx = {"tenant_id": str(tenant_id), "service_id": str(service_id), "date": day.isoformat()}
        service = await self.require_service(tenant_id, service_id)
        result = AvailabilityResult(
            date=day,
            service_id=service.id,
            service_name=service.name,
            service_duration=service.duration,
            is_home_visit_supported=True,
            requires_staff=service.requires_staff_assignment,
        )

        if not service.supports_home_visit:
            return _unsupported(result)
        settings = await self._gateway.get_home_visit_config(tenant_id)
        if not settings.enabled:
            return _unsupported(result)

        if await self._gateway.is_date_blocked(tenant_id, day):
            result.is_blocked = True
            result.message = MSG_BLOCKED
            return result

        quota = await self._quota.compute_remaining(tenant_id, day, service, settings)
        result.daily_quota = quota.daily_quota
        result.booked_count = quota.booked_count
        result.remaining_quota = quota.remaining_quota

        tz = await self.tenant_zone(tenant_id)
        for time_str in quota.time_slots:
            start = _dt.datetime.combine(day, parse_hhmm(time_str), tzinfo=tz)
            is_booked = time_str in quota.booked_time_slots
            result.slots.append(
                SlotResult(
                    time=time_str,
                    start=start,
                    end=start + _dt.timedelta(minutes=service.duration),
                    available=not is_booked and quota.remaining_quota > 0,
                    is_booked=is_booked,
                )
            )

        candidates = [s for s in result.slots if s.available]
        if service.requires_staff_assignment and candidates:
            await self._apply_staff(tenant_id, service, day, candidates)

        result.available_slots = sum(1 for s in result.slots if s.available)
        if quota.remaining_quota == 0 or not candidates:
            result.message = MSG_FULLY_BOOKED
        elif result.available_slots == 0:
            result.message = MSG_NO_STAFF
        else:
            result.message = slots_available_message(result.available_slots)

        logger.info(
            "Home-visit availability: %d/%d slots, quota %d/%d",
            result.available_slots, len(result.slots), quota.booked_count, quota.daily_quota,
            extra=ctx,
        )
        return result

    async def get_staff_roster(
        self, tenant_id: UUID, service_id: UUID, day: _dt.date, time_str: str
    ) -> List[StaffCheck]:
        """Every qualified staff member's check for one slot, in listing order."""
        if not is_hhmm(time_str):
            raise ValidationError("time must be HH:MM", details={"field": "time", "value": time_str})
        service = await self.require_service(tenant_id, service_id)
        tz = await self.tenant_zone(tenant_id)
        start = _dt.datetime.combine(day, parse_hhmm(time_str), tzinfo=tz)

        staff = await self._gateway.get_staff_for_service(tenant_id, service.id)
        fallback = await self._evaluator.fallback_hours(tenant_id, day)
        return await self.check_staff(
            tenant_id, staff, day, start, service.duration, service.travel_buffer_minutes, fallback
        )

    async def get_available_dates(
        self, tenant_id: UUID, start: _dt.date, end: _dt.date
    ) -> List[_dt.date]:
        """Days in [start, end] that no blocked-date entry covers."""
        if end < start:
            raise ValidationError("end must not be before start", details={"start": str(start), "end": str(end)})
        span = (end - start).days + 1
        if span > self._config.available_dates_max_span_days:
            raise ValidationError(
                f"Date range may cover at most {self._config.available_dates_max_span_days} days",
                details={"days": span},
            )
        blocked = set(await self._gateway.list_blocked_dates(tenant_id, start, end))
        return [
            start + _dt.timedelta(days=i)
            for i in range(span)
            if start + _dt.timedelta(days=i) not in blocked
        ]

    async def require_service(self, tenant_id: UUID, service_id: UUID) -> ServiceInfo:
        service = await self._gateway.get_service(tenant_id, service_id)
        if service is None:
            raise ServiceNotFoundError("Service not found", details={"serviceId": str(service_id)})
        return service

    async def tenant_zone(self, tenant_id: UUID) -> ZoneInfo:
        tenant = await self._gateway.get_tenant(tenant_id)
        if tenant is None:
            raise TenantNotFoundError("Tenant not found", details={"tenantId": str(tenant_id)})
        return zone_for(tenant.timezone)

    async def check_staff(
        self,
        tenant_id: UUID,
        staff: Sequence[StaffInfo],
        day: _dt.date,
        slot_start: _dt.datetime,
        duration: int,
        travel_buffer_minutes: int,
        fallback: Optional[WorkingHours] = None,
        semaphore: Optional[asyncio.Semaphore] = None,
    ) -> List[StaffCheck]:
        """Check each staff member for one slot concurrently; results keep input order."""
        sem = semaphore or asyncio.Semaphore(self._config.max_concurrent_checks)

        async def _one(member: StaffInfo) -> StaffCheck:
            async with sem:
                return await self._evaluator.check(
                    tenant_id, member, day, slot_start, duration, travel_buffer_minutes, fallback
                )

        return list(await asyncio.gather(*(_one(m) for m in staff)))

    async def _apply_staff(
        self,
        tenant_id: UUID,
        service: ServiceInfo,
        day: _dt.date,
        candidates: List[SlotResult],
    ) -> None:
        include_degraded = self._config.degraded_staff_policy == "include"
        try:
            staff = await self._gateway.get_staff_for_service(tenant_id, service.id)
            fallback = await self._evaluator.fallback_hours(tenant_id, day)
        except ExternalServiceError as exc:
            logger.warning(
                "Staff lookup failed, every candidate slot is degraded: %s", exc,
                extra={"tenant_id": str(tenant_id), "service_id": str(service.id), "date": day.isoformat()},
            )
            for slot in candidates:
                slot.staff_degraded = 1
                slot.available = include_degraded
            return

        if not staff:
            for slot in candidates:
                slot.available = False
            return

        # one semaphore for the whole slots x staff fan-out of this request
        sem = asyncio.Semaphore(self._config.max_concurrent_checks)
        per_slot = await asyncio.gather(
            *(
                self.check_staff(
                    tenant_id, staff, day, slot.start, service.duration,
                    service.travel_buffer_minutes, fallback, sem,
                )
                for slot in candidates
            )
        )
        for slot, checks in zip(candidates, per_slot):
            free = [c for c in checks if c.is_available]
            slot.staff_available = len(free)
            slot.staff_names = [c.staff.name for c in free]
            slot.staff_degraded = sum(1 for c in checks if c.outcome is CheckOutcome.DEGRADED)
            slot.available = bool(free) or (include_degraded and slot.staff_degraded > 0)


def _unsupported(result: AvailabilityResult) -> AvailabilityResult:
    result.is_home_visit_supported = False
    result.message = MSG_UNSUPPORTED
    return result
