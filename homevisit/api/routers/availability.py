"""Home-visit availability API: slots, staff roster, best staff, open dates."""

import datetime as _dt
import logging
import os
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from homevisit.api.dependencies import get_availability_service, get_staff_selector, get_tenant_id
from homevisit.api.schemas.availability import (
    AvailabilityResponse,
    AvailableDatesResponse,
    BestStaffResponse,
    StaffCheckSchema,
    StaffRosterResponse,
)
from homevisit.config.availability import is_hhmm
from homevisit.core.exceptions import StaffUnavailableError, ValidationError
from homevisit.services import AvailabilityService, BestStaffSelector
from homevisit.services.gateway import parse_hhmm

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])

AVAILABILITY_RATE_LIMIT = os.environ.get("AVAILABILITY_RATE_LIMIT", "60/minute")
limiter = Limiter(key_func=get_remote_address)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _require(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required", details={"field": field})
    return value.strip()


def _parse_service_id(value: Optional[str]) -> UUID:
    raw = _require(value, "serviceId")
    try:
        return UUID(raw)
    except ValueError:
        raise ValidationError("serviceId must be a UUID", details={"field": "serviceId", "value": raw})


def _parse_date(value: Optional[str], field: str = "date") -> _dt.date:
    raw = _require(value, field)
    try:
        return _dt.datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field} must be YYYY-MM-DD", details={"field": field, "value": raw})


def _parse_time(value: Optional[str]) -> str:
    raw = _require(value, "time")
    if not is_hhmm(raw):
        raise ValidationError("time must be HH:MM", details={"field": "time", "value": raw})
    return raw


# ── Endpoints ─────────────────────────────────────────────────────────────────

@router.get("/home-visit-availability", response_model=AvailabilityResponse, response_model_exclude_none=True)
@limiter.limit(AVAILABILITY_RATE_LIMIT)
async def home_visit_availability(
    request: Request,
    service_id: Optional[str] = Query(None, alias="serviceId"),
    date: Optional[str] = Query(None),
    tenant_id: UUID = Depends(get_tenant_id),
    svc: AvailabilityService = Depends(get_availability_service),
):
    sid = _parse_service_id(service_id)
    day = _parse_date(date)
    result = await svc.get_available_slots(tenant_id, sid, day)
    body = AvailabilityResponse.from_result(result)
    if not result.is_home_visit_supported:
        # callers branch on isHomeVisitSupported, the 400 is informational
        return JSONResponse(status_code=400, content=body.to_json())
    return body


@router.get("/home-visit-availability/staff", response_model=StaffRosterResponse, response_model_exclude_none=True)
@limiter.limit(AVAILABILITY_RATE_LIMIT)
async def home_visit_staff_roster(
    request: Request,
    service_id: Optional[str] = Query(None, alias="serviceId"),
    date: Optional[str] = Query(None),
    time: Optional[str] = Query(None),
    tenant_id: UUID = Depends(get_tenant_id),
    svc: AvailabilityService = Depends(get_availability_service),
):
    sid = _parse_service_id(service_id)
    day = _parse_date(date)
    slot = _parse_time(time)
    checks = await svc.get_staff_roster(tenant_id, sid, day, slot)
    return StaffRosterResponse(
        date=day,
        time=slot,
        service_id=sid,
        staff=[StaffCheckSchema.from_check(c) for c in checks],
    )


@router.get("/home-visit-availability/best-staff", response_model=BestStaffResponse)
@limiter.limit(AVAILABILITY_RATE_LIMIT)
async def home_visit_best_staff(
    request: Request,
    service_id: Optional[str] = Query(None, alias="serviceId"),
    date: Optional[str] = Query(None),
    time: Optional[str] = Query(None),
    tenant_id: UUID = Depends(get_tenant_id),
    svc: AvailabilityService = Depends(get_availability_service),
    selector: BestStaffSelector = Depends(get_staff_selector),
):
    sid = _parse_service_id(service_id)
    day = _parse_date(date)
    slot = _parse_time(time)
    service = await svc.require_service(tenant_id, sid)
    tz = await svc.tenant_zone(tenant_id)
    start = _dt.datetime.combine(day, parse_hhmm(slot), tzinfo=tz)
    end = start + _dt.timedelta(minutes=service.duration)

    staff = await selector.select_best(tenant_id, sid, day, start, end)
    if staff is None and service.requires_staff_assignment:
        raise StaffUnavailableError(
            "No staff available for this slot",
            details={"serviceId": str(sid), "date": day.isoformat(), "time": slot},
        )
    return BestStaffResponse.from_staff(staff)


@router.get("/available-dates", response_model=AvailableDatesResponse)
@limiter.limit(AVAILABILITY_RATE_LIMIT)
async def available_dates(
    request: Request,
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    tenant_id: UUID = Depends(get_tenant_id),
    svc: AvailabilityService = Depends(get_availability_service),
):
    first = _parse_date(start, "start")
    last = _parse_date(end, "end")
    dates = await svc.get_available_dates(tenant_id, first, last)
    return AvailableDatesResponse(start=first, end=last, dates=dates)
