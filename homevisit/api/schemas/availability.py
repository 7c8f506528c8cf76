"""Pydantic schemas for the home-visit availability API (camelCase on the wire)."""
from __future__ import annotations

import datetime as _dt
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from homevisit.services.types import AvailabilityResult, SlotResult, StaffCheck, StaffInfo


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SlotSchema(CamelModel):
    time: str
    start: _dt.datetime
    end: _dt.datetime
    available: bool
    is_booked: bool
    staff_available: int = 0
    staff_names: List[str] = []
    staff_degraded: int = 0

    @classmethod
    def from_result(cls, slot: SlotResult) -> SlotSchema:
        return cls(
            time=slot.time,
            start=slot.start,
            end=slot.end,
            available=slot.available,
            is_booked=slot.is_booked,
            staff_available=slot.staff_available,
            staff_names=list(slot.staff_names),
            staff_degraded=slot.staff_degraded,
        )


class AvailabilityResponse(CamelModel):
    date: _dt.date
    service_id: UUID
    service_name: str
    service_duration: int
    is_home_visit_supported: bool
    requires_staff: bool
    daily_quota: int = 0
    booked_count: int = 0
    remaining_quota: int = 0
    slots: List[SlotSchema] = []
    available_slots: int = 0
    message: str = ""
    is_blocked: Optional[bool] = None
    """Serialized only when the whole date is blocked."""

    @classmethod
    def from_result(cls, result: AvailabilityResult) -> AvailabilityResponse:
        return cls(
            date=result.date,
            service_id=result.service_id,
            service_name=result.service_name,
            service_duration=result.service_duration,
            is_home_visit_supported=result.is_home_visit_supported,
            requires_staff=result.requires_staff,
            daily_quota=result.daily_quota,
            booked_count=result.booked_count,
            remaining_quota=result.remaining_quota,
            slots=[SlotSchema.from_result(s) for s in result.slots],
            available_slots=result.available_slots,
            message=result.message,
            is_blocked=True if result.is_blocked else None,
        )

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class StaffCheckSchema(CamelModel):
    staff_id: UUID
    staff_name: str
    is_specialist: bool = False
    status: str
    booking_load: int = 0
    reason: Optional[str] = None

    @classmethod
    def from_check(cls, check: StaffCheck) -> StaffCheckSchema:
        return cls(
            staff_id=check.staff.id,
            staff_name=check.staff.name,
            is_specialist=check.staff.is_specialist,
            status=check.outcome.value,
            booking_load=check.booking_load,
            reason=check.reason.value if check.reason else None,
        )


class StaffRosterResponse(CamelModel):
    date: _dt.date
    time: str
    service_id: UUID
    staff: List[StaffCheckSchema] = []


class BestStaffResponse(CamelModel):
    staff_id: Optional[UUID] = None
    staff_name: Optional[str] = None

    @classmethod
    def from_staff(cls, staff: Optional[StaffInfo]) -> BestStaffResponse:
        if staff is None:
            return cls()
        return cls(staff_id=staff.id, staff_name=staff.name)


class AvailableDatesResponse(CamelModel):
    start: _dt.date
    end: _dt.date
    dates: List[_dt.date] = []
