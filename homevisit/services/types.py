"""Core data structures shared by the gateway, evaluator, tracker and composer."""
from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import FrozenSet, List, Optional, Tuple
from uuid import UUID


class DayOfWeek(IntEnum):
    """Schedule lookup key. Same numbering as ``date.weekday()``."""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def of(cls, day: _dt.date) -> "DayOfWeek":
        return cls(day.weekday())


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


ACTIVE_STATUSES: Tuple[BookingStatus, ...] = (BookingStatus.PENDING, BookingStatus.CONFIRMED)
"""Statuses that occupy quota, time slots and staff time."""

LOAD_STATUSES: Tuple[BookingStatus, ...] = (BookingStatus.CONFIRMED,)
"""Statuses counted in a staff member's booking load (ranking only)."""


class ServiceType(str, Enum):
    ON_PREMISE = "on_premise"
    HOME_VISIT = "home_visit"
    BOTH = "both"


@dataclass(frozen=True)
class TenantInfo:
    id: UUID
    subdomain: str
    timezone: str = "Asia/Jakarta"


@dataclass(frozen=True)
class ServiceInfo:
    id: UUID
    tenant_id: UUID
    name: str
    duration: int = 60
    service_type: ServiceType = ServiceType.ON_PREMISE
    requires_staff_assignment: bool = False
    travel_buffer_minutes: int = 0
    daily_quota: Optional[int] = None
    time_slots: Optional[Tuple[str, ...]] = None

    @property
    def supports_home_visit(self) -> bool:
        return self.service_type != ServiceType.ON_PREMISE


@dataclass(frozen=True)
class HomeVisitSettings:
    """Tenant-wide home-visit settings. None means "not configured, fall back"."""
    enabled: bool = True
    daily_quota: Optional[int] = None
    time_slots: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class StaffInfo:
    id: UUID
    name: str
    is_specialist: bool = False
    can_do_home_visit: bool = True
    max_daily_home_visits: Optional[int] = None
    """Own cap on pending/confirmed home visits per day; None uses the configured default."""


@dataclass(frozen=True)
class WorkingHours:
    start: _dt.time
    end: _dt.time
    available: bool = True


@dataclass(frozen=True)
class BookingWindow:
    """A staff member's existing booking, in tenant-local time."""
    start: _dt.datetime
    duration: int

    @property
    def end(self) -> _dt.datetime:
        return self.start + _dt.timedelta(minutes=self.duration)


class UnavailableReason(str, Enum):
    ON_LEAVE = "on_leave"
    NOT_WORKING = "not_working"
    OUTSIDE_HOURS = "outside_hours"
    CONFLICT = "conflict"
    NO_HOME_VISITS = "no_home_visits"
    HOME_VISIT_CAP = "home_visit_cap"
    TIMEOUT = "timeout"
    ERROR = "error"


@dataclass(frozen=True)
class StaffEvaluation:
    is_available: bool
    booking_load: int = 0
    reason: Optional[UnavailableReason] = None


class CheckOutcome(str, Enum):
    """Result of one staff x slot check.

    DEGRADED means the check could not be completed (timeout or backend
    error); it is neither a confirmed yes nor a confirmed no.
    """
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class StaffCheck:
    staff: StaffInfo
    outcome: CheckOutcome
    booking_load: int = 0
    reason: Optional[UnavailableReason] = None

    @property
    def is_available(self) -> bool:
        return self.outcome is CheckOutcome.AVAILABLE


@dataclass(frozen=True)
class QuotaSnapshot:
    daily_quota: int
    booked_count: int
    remaining_quota: int
    booked_time_slots: FrozenSet[str]
    time_slots: Tuple[str, ...]


@dataclass
class SlotResult:
    time: str
    start: _dt.datetime
    end: _dt.datetime
    available: bool
    is_booked: bool
    staff_available: int = 0
    staff_names: List[str] = field(default_factory=list)
    staff_degraded: int = 0


@dataclass
class AvailabilityResult:
    date: _dt.date
    service_id: UUID
    service_name: str
    service_duration: int
    is_home_visit_supported: bool
    requires_staff: bool
    daily_quota: int = 0
    booked_count: int = 0
    remaining_quota: int = 0
    slots: List[SlotResult] = field(default_factory=list)
    available_slots: int = 0
    message: str = ""
    is_blocked: bool = False
