"""Constraint data gateway: read-only queries the availability engine depends on.

BaseConstraintGateway is the contract; SqlConstraintGateway implements it on
the repositories. Results are point-in-time snapshots: nothing here holds a
transaction open across calls.
"""
from __future__ import annotations

import datetime as _dt
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Set, TypeVar
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from homevisit.config import AvailabilityConfig
from homevisit.config.availability import is_hhmm
from homevisit.core.exceptions import ExternalServiceError
from homevisit.infra.database.repositories import (
    BlockedDateRepository,
    BookingRepository,
    ServiceRepository,
    StaffRepository,
    TenantRepository,
)
from homevisit.services.blocked_dates import blocked_days, is_blocked_on
from homevisit.services.types import (
    BookingStatus,
    BookingWindow,
    DayOfWeek,
    HomeVisitSettings,
    ServiceInfo,
    ServiceType,
    StaffInfo,
    TenantInfo,
    WorkingHours,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def zone_for(name: Optional[str]) -> ZoneInfo:
    try:
        return ZoneInfo(name or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, using UTC", name)
        return ZoneInfo("UTC")


def day_bounds(day: _dt.date, tz: ZoneInfo) -> tuple[_dt.datetime, _dt.datetime]:
    """[00:00 of day, 00:00 of next day) in tz."""
    start = _dt.datetime.combine(day, _dt.time(0, 0), tzinfo=tz)
    end = _dt.datetime.combine(day + _dt.timedelta(days=1), _dt.time(0, 0), tzinfo=tz)
    return start, end


def parse_hhmm(value: str) -> _dt.time:
    return _dt.datetime.strptime(value, "%H:%M").time()


class BaseConstraintGateway(ABC):
    @abstractmethod
    async def resolve_tenant(self, identifier: str) -> Optional[TenantInfo]:
        """UUID string or subdomain slug → tenant."""

    @abstractmethod
    async def get_tenant(self, tenant_id: UUID) -> Optional[TenantInfo]:
        ...

    @abstractmethod
    async def get_service(self, tenant_id: UUID, service_id: UUID) -> Optional[ServiceInfo]:
        ...

    @abstractmethod
    async def get_home_visit_config(self, tenant_id: UUID) -> HomeVisitSettings:
        """Tenant home-visit settings; defaults when the tenant saved none."""

    @abstractmethod
    async def is_date_blocked(self, tenant_id: UUID, day: _dt.date) -> bool:
        ...

    @abstractmethod
    async def list_blocked_dates(
        self, tenant_id: UUID, start: _dt.date, end: _dt.date
    ) -> List[_dt.date]:
        ...

    @abstractmethod
    async def count_home_visit_bookings(
        self, tenant_id: UUID, day: _dt.date, statuses: Sequence[BookingStatus]
    ) -> int:
        ...

    @abstractmethod
    async def list_home_visit_booking_times(
        self, tenant_id: UUID, day: _dt.date, statuses: Sequence[BookingStatus]
    ) -> Set[str]:
        """Start times (HH:MM, tenant-local) of the day's home-visit bookings."""

    @abstractmethod
    async def get_staff_for_service(self, tenant_id: UUID, service_id: UUID) -> List[StaffInfo]:
        """Qualified active staff in stable listing order."""

    @abstractmethod
    async def is_staff_on_leave(self, staff_id: UUID, day: _dt.date) -> bool:
        ...

    @abstractmethod
    async def get_business_hours(
        self, tenant_id: UUID, day_of_week: DayOfWeek
    ) -> Optional[WorkingHours]:
        ...

    @abstractmethod
    async def get_staff_working_hours(
        self, staff_id: UUID, day_of_week: DayOfWeek, fallback: WorkingHours
    ) -> WorkingHours:
        """Custom schedule for that weekday, else fallback."""

    @abstractmethod
    async def count_staff_bookings(
        self,
        tenant_id: UUID,
        staff_id: UUID,
        day: _dt.date,
        statuses: Sequence[BookingStatus],
    ) -> int:
        ...

    @abstractmethod
    async def count_staff_home_visits(
        self,
        tenant_id: UUID,
        staff_id: UUID,
        day: _dt.date,
        statuses: Sequence[BookingStatus],
    ) -> int:
        """Home-visit bookings of this staff member on day (tenant-local)."""

    @abstractmethod
    async def list_staff_bookings(
        self,
        tenant_id: UUID,
        staff_id: UUID,
        day: _dt.date,
        statuses: Sequence[BookingStatus],
    ) -> List[BookingWindow]:
        ...


class SqlConstraintGateway(BaseConstraintGateway):
    """Gateway over PostgreSQL.

    Each call opens its own session from the injected factory, so concurrent
    calls are safe. SQLAlchemy failures surface as ExternalServiceError.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        config: Optional[AvailabilityConfig] = None,
    ) -> None:
        self._session_factory = session_factory
        self._config = config or AvailabilityConfig()
        self._zones: Dict[UUID, ZoneInfo] = {}

    async def _read(self, label: str, fn: Callable[[AsyncSession], Awaitable[T]]) -> T:
        try:
            async with self._session_factory() as session:
                return await fn(session)
        except (SQLAlchemyError, OSError) as exc:
            raise ExternalServiceError(f"{label} failed", cause=exc) from exc

    async def _zone(self, tenant_id: UUID) -> ZoneInfo:
        if tenant_id not in self._zones:
            tenant = await self.get_tenant(tenant_id)
            self._zones[tenant_id] = zone_for(tenant.timezone if tenant else None)
        return self._zones[tenant_id]

    async def resolve_tenant(self, identifier: str) -> Optional[TenantInfo]:
        try:
            tenant_id = UUID(identifier)
        except ValueError:
            row = await self._read(
                "tenant lookup", lambda s: TenantRepository(s).get_by_subdomain(identifier)
            )
            return _tenant_info(row) if row else None
        return await self.get_tenant(tenant_id)

    async def get_tenant(self, tenant_id: UUID) -> Optional[TenantInfo]:
        row = await self._read("tenant lookup", lambda s: TenantRepository(s).get_by_id(tenant_id))
        return _tenant_info(row) if row else None

    async def get_service(self, tenant_id: UUID, service_id: UUID) -> Optional[ServiceInfo]:
        row = await self._read(
            "service lookup", lambda s: ServiceRepository(s).get_for_tenant(tenant_id, service_id)
        )
        if row is None:
            return None
        slots = row.home_visit_time_slots
        return ServiceInfo(
            id=row.id,
            tenant_id=row.tenant_id,
            name=row.name,
            duration=row.duration or 60,
            service_type=ServiceType(row.service_type),
            requires_staff_assignment=bool(row.requires_staff_assignment),
            travel_buffer_minutes=row.home_visit_min_buffer_minutes or 0,
            daily_quota=row.daily_home_visit_quota or None,
            time_slots=tuple(s for s in slots if is_hhmm(s)) if slots else None,
        )

    async def get_home_visit_config(self, tenant_id: UUID) -> HomeVisitSettings:
        row = await self._read("tenant lookup", lambda s: TenantRepository(s).get_by_id(tenant_id))
        return settings_from_json(row.home_visit_config if row else None)

    async def is_date_blocked(self, tenant_id: UUID, day: _dt.date) -> bool:
        rows = await self._read(
            "blocked-date lookup",
            lambda s: BlockedDateRepository(s).list_candidates(tenant_id, day, day),
        )
        return any(is_blocked_on(r, day) for r in rows)

    async def list_blocked_dates(
        self, tenant_id: UUID, start: _dt.date, end: _dt.date
    ) -> List[_dt.date]:
        rows = await self._read(
            "blocked-date lookup",
            lambda s: BlockedDateRepository(s).list_candidates(tenant_id, start, end),
        )
        return blocked_days(rows, start, end)

    async def count_home_visit_bookings(
        self, tenant_id: UUID, day: _dt.date, statuses: Sequence[BookingStatus]
    ) -> int:
        start, end = day_bounds(day, await self._zone(tenant_id))
        return await self._read(
            "home-visit booking count",
            lambda s: BookingRepository(s).count_home_visits(tenant_id, start, end, _values(statuses)),
        )

    async def list_home_visit_booking_times(
        self, tenant_id: UUID, day: _dt.date, statuses: Sequence[BookingStatus]
    ) -> Set[str]:
        tz = await self._zone(tenant_id)
        start, end = day_bounds(day, tz)
        starts = await self._read(
            "home-visit booking times",
            lambda s: BookingRepository(s).list_home_visit_starts(
                tenant_id, start, end, _values(statuses)
            ),
        )
        return {ts.astimezone(tz).strftime("%H:%M") for ts in starts}

    async def get_staff_for_service(self, tenant_id: UUID, service_id: UUID) -> List[StaffInfo]:
        include_unmapped = self._config.capability_when_unmapped == "allow"
        rows = await self._read(
            "qualified staff lookup",
            lambda s: StaffRepository(s).list_qualified(
                tenant_id, service_id, include_unmapped=include_unmapped
            ),
        )
        return [_staff_info(staff, spec) for staff, spec in rows]

    async def is_staff_on_leave(self, staff_id: UUID, day: _dt.date) -> bool:
        return await self._read(
            "staff leave lookup", lambda s: StaffRepository(s).has_leave_on(staff_id, day)
        )

    async def get_business_hours(
        self, tenant_id: UUID, day_of_week: DayOfWeek
    ) -> Optional[WorkingHours]:
        row = await self._read(
            "business hours lookup", lambda s: TenantRepository(s).get_business_hours(tenant_id)
        )
        if row is None:
            return None
        return hours_from_json((row.schedule or {}).get(str(int(day_of_week))))

    async def get_staff_working_hours(
        self, staff_id: UUID, day_of_week: DayOfWeek, fallback: WorkingHours
    ) -> WorkingHours:
        row = await self._read(
            "staff schedule lookup",
            lambda s: StaffRepository(s).get_schedule(staff_id, int(day_of_week)),
        )
        if row is None:
            return fallback
        return WorkingHours(start=row.start_time, end=row.end_time, available=row.is_available)

    async def count_staff_bookings(
        self,
        tenant_id: UUID,
        staff_id: UUID,
        day: _dt.date,
        statuses: Sequence[BookingStatus],
    ) -> int:
        start, end = day_bounds(day, await self._zone(tenant_id))
        return await self._read(
            "staff booking count",
            lambda s: BookingRepository(s).count_for_staff(
                tenant_id, staff_id, start, end, _values(statuses)
            ),
        )

    async def count_staff_home_visits(
        self,
        tenant_id: UUID,
        staff_id: UUID,
        day: _dt.date,
        statuses: Sequence[BookingStatus],
    ) -> int:
        start, end = day_bounds(day, await self._zone(tenant_id))
        return await self._read(
            "staff home-visit count",
            lambda s: BookingRepository(s).count_home_visits_for_staff(
                tenant_id, staff_id, start, end, _values(statuses)
            ),
        )

    async def list_staff_bookings(
        self,
        tenant_id: UUID,
        staff_id: UUID,
        day: _dt.date,
        statuses: Sequence[BookingStatus],
    ) -> List[BookingWindow]:
        tz = await self._zone(tenant_id)
        start, end = day_bounds(day, tz)
        rows = await self._read(
            "staff bookings lookup",
            lambda s: BookingRepository(s).list_for_staff(
                tenant_id, staff_id, start, end, _values(statuses)
            ),
        )
        return [BookingWindow(start=b.scheduled_at.astimezone(tz), duration=b.duration) for b in rows]


def settings_from_json(raw: Optional[Dict[str, Any]]) -> HomeVisitSettings:
    """Tenant home_visit_config JSON → settings. Zero/invalid values fall back (None)."""
    if not raw:
        return HomeVisitSettings()
    quota = raw.get("dailyQuota")
    slots = raw.get("timeSlots")
    valid_slots = tuple(s for s in slots if is_hhmm(s)) if isinstance(slots, list) else ()
    return HomeVisitSettings(
        enabled=bool(raw.get("enabled", True)),
        daily_quota=quota if isinstance(quota, int) and quota > 0 else None,
        time_slots=valid_slots or None,
    )


def hours_from_json(raw: Optional[Dict[str, Any]]) -> Optional[WorkingHours]:
    """One business_hours.schedule entry → WorkingHours (None if missing or malformed)."""
    if not raw:
        return None
    open_time, close_time = raw.get("open_time"), raw.get("close_time")
    if not (is_hhmm(open_time) and is_hhmm(close_time)):
        return None
    return WorkingHours(
        start=parse_hhmm(open_time),
        end=parse_hhmm(close_time),
        available=bool(raw.get("is_open", True)),
    )


def _staff_info(row: Any, is_specialist: bool) -> StaffInfo:
    raw = row.home_visit_config or {}
    cap = raw.get("maxDailyHomeVisits")
    return StaffInfo(
        id=row.id,
        name=row.name,
        is_specialist=is_specialist,
        can_do_home_visit=raw.get("canDoHomeVisit") is not False,
        max_daily_home_visits=cap if isinstance(cap, int) and not isinstance(cap, bool) and cap > 0 else None,
    )


def _tenant_info(row: Any) -> TenantInfo:
    return TenantInfo(id=row.id, subdomain=row.subdomain, timezone=row.timezone or "UTC")


def _values(statuses: Sequence[BookingStatus]) -> List[str]:
    return [BookingStatus(s).value for s in statuses]
