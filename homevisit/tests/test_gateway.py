"""Tests for SqlConstraintGateway (repositories mocked) and its JSON/time helpers."""
from __future__ import annotations

import asyncio
import datetime as _dt
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4
from zoneinfo import ZoneInfo

from sqlalchemy.exc import SQLAlchemyError

from homevisit.config import AvailabilityConfig
from homevisit.core.exceptions import ExternalServiceError
from homevisit.services.gateway import (
    SqlConstraintGateway,
    day_bounds,
    hours_from_json,
    settings_from_json,
    zone_for,
)
from homevisit.services.types import (
    BookingStatus,
    DayOfWeek,
    HomeVisitSettings,
    ServiceType,
    WorkingHours,
)

DAY = _dt.date(2024, 6, 10)


def _run(coro):
    return asyncio.run(coro)


class _FakeSessionCtx:
    async def __aenter__(self):
        return MagicMock()

    async def __aexit__(self, *_):
        return False


def _tenant_row(**kwargs):
    defaults = {
        "id": uuid4(),
        "subdomain": "glow",
        "timezone": "Asia/Jakarta",
        "home_visit_config": None,
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def _repo(**methods):
    """Patchable repository class whose instances expose the given AsyncMocks."""
    instance = MagicMock()
    for name, value in methods.items():
        setattr(instance, name, value if isinstance(value, AsyncMock) else AsyncMock(return_value=value))
    return MagicMock(return_value=instance)


class TestSqlConstraintGateway(unittest.TestCase):
    def gateway(self, **config):
        return SqlConstraintGateway(lambda: _FakeSessionCtx(), AvailabilityConfig(**config))

    def test_capability_flag_allow(self):
        staff = SimpleNamespace(id=uuid4(), name="Ana", home_visit_config=None)
        repo = _repo(list_qualified=[(staff, True)])
        with patch("homevisit.services.gateway.StaffRepository", repo):
            result = _run(self.gateway().get_staff_for_service(uuid4(), uuid4()))
        self.assertEqual(result[0].id, staff.id)
        self.assertTrue(result[0].is_specialist)
        _, kwargs = repo.return_value.list_qualified.call_args
        self.assertTrue(kwargs["include_unmapped"])

    def test_capability_flag_deny(self):
        repo = _repo(list_qualified=[])
        with patch("homevisit.services.gateway.StaffRepository", repo):
            _run(self.gateway(capability_when_unmapped="deny").get_staff_for_service(uuid4(), uuid4()))
        _, kwargs = repo.return_value.list_qualified.call_args
        self.assertFalse(kwargs["include_unmapped"])

    def test_database_error_becomes_external_service_error(self):
        repo = _repo(get_by_id=AsyncMock(side_effect=SQLAlchemyError("connection reset")))
        with patch("homevisit.services.gateway.TenantRepository", repo):
            with self.assertRaises(ExternalServiceError) as ctx:
                _run(self.gateway().get_tenant(uuid4()))
        self.assertIsInstance(ctx.exception.cause, SQLAlchemyError)

    def test_resolve_tenant_by_uuid_and_subdomain(self):
        row = _tenant_row()
        repo = _repo(get_by_id=row, get_by_subdomain=row)
        with patch("homevisit.services.gateway.TenantRepository", repo):
            gw = self.gateway()
            by_id = _run(gw.resolve_tenant(str(row.id)))
            by_slug = _run(gw.resolve_tenant("glow"))
        self.assertEqual(by_id.id, row.id)
        self.assertEqual(by_slug.subdomain, "glow")
        repo.return_value.get_by_subdomain.assert_awaited_once_with("glow")

    def test_booking_times_in_tenant_zone(self):
        row = _tenant_row()
        tenants = _repo(get_by_id=row)
        bookings = _repo(
            list_home_visit_starts=[_dt.datetime(2024, 6, 10, 2, 0, tzinfo=_dt.timezone.utc)]
        )
        with patch("homevisit.services.gateway.TenantRepository", tenants), \
                patch("homevisit.services.gateway.BookingRepository", bookings):
            times = _run(self.gateway().list_home_visit_booking_times(row.id, DAY, [BookingStatus.CONFIRMED]))
        self.assertEqual(times, {"09:00"})
        args = bookings.return_value.list_home_visit_starts.call_args.args
        self.assertEqual(args[1], _dt.datetime(2024, 6, 10, tzinfo=ZoneInfo("Asia/Jakarta")))
        self.assertEqual(args[3], ["confirmed"])

    def test_service_mapping(self):
        row = SimpleNamespace(
            id=uuid4(), tenant_id=uuid4(), name="Facial", duration=None,
            service_type="both", requires_staff_assignment=True,
            home_visit_min_buffer_minutes=15, daily_home_visit_quota=0,
            home_visit_time_slots=["10:00", "bogus"],
        )
        with patch("homevisit.services.gateway.ServiceRepository", _repo(get_for_tenant=row)):
            service = _run(self.gateway().get_service(row.tenant_id, row.id))
        self.assertEqual(service.duration, 60)
        self.assertIs(service.service_type, ServiceType.BOTH)
        self.assertEqual(service.travel_buffer_minutes, 15)
        self.assertIsNone(service.daily_quota)
        self.assertEqual(service.time_slots, ("10:00",))

    def test_staff_home_visit_config_mapping(self):
        rows = [
            (SimpleNamespace(id=uuid4(), name="Ana", home_visit_config=None), False),
            (SimpleNamespace(id=uuid4(), name="Bea", home_visit_config={"canDoHomeVisit": False}), False),
            (SimpleNamespace(id=uuid4(), name="Cal", home_visit_config={"maxDailyHomeVisits": 2}), True),
            (SimpleNamespace(id=uuid4(), name="Dee", home_visit_config={"maxDailyHomeVisits": 0}), False),
        ]
        with patch("homevisit.services.gateway.StaffRepository", _repo(list_qualified=rows)):
            ana, bea, cal, dee = _run(self.gateway().get_staff_for_service(uuid4(), uuid4()))
        self.assertTrue(ana.can_do_home_visit)
        self.assertIsNone(ana.max_daily_home_visits)
        self.assertFalse(bea.can_do_home_visit)
        self.assertEqual(cal.max_daily_home_visits, 2)
        self.assertTrue(cal.is_specialist)
        self.assertIsNone(dee.max_daily_home_visits)

    def test_staff_home_visit_count_uses_tenant_day(self):
        row = _tenant_row()
        staff_id = uuid4()
        bookings = _repo(count_home_visits_for_staff=4)
        with patch("homevisit.services.gateway.TenantRepository", _repo(get_by_id=row)), \
                patch("homevisit.services.gateway.BookingRepository", bookings):
            count = _run(self.gateway().count_staff_home_visits(
                row.id, staff_id, DAY, [BookingStatus.PENDING, BookingStatus.CONFIRMED]
            ))
        self.assertEqual(count, 4)
        args = bookings.return_value.count_home_visits_for_staff.call_args.args
        self.assertEqual(args[1], staff_id)
        self.assertEqual(args[2], _dt.datetime(2024, 6, 10, tzinfo=ZoneInfo("Asia/Jakarta")))
        self.assertEqual(args[4], ["pending", "confirmed"])

    def test_miscased_recurring_pattern_still_recurs(self):
        row = SimpleNamespace(
            id=uuid4(), date_start=_dt.date(2024, 6, 3), date_end=None,
            recurring_pattern="Weekly", recurring_until=None,
        )
        with patch("homevisit.services.gateway.BlockedDateRepository", _repo(list_candidates=[row])):
            gw = self.gateway()
            self.assertTrue(_run(gw.is_date_blocked(uuid4(), DAY)))
            days = _run(gw.list_blocked_dates(uuid4(), DAY, _dt.date(2024, 6, 20)))
        self.assertEqual(days, [DAY, _dt.date(2024, 6, 17)])

    def test_unknown_recurring_pattern_does_not_break_lookup(self):
        row = SimpleNamespace(
            id=uuid4(), date_start=_dt.date(2024, 6, 3), date_end=None,
            recurring_pattern="fortnightly", recurring_until=None,
        )
        with patch("homevisit.services.gateway.BlockedDateRepository", _repo(list_candidates=[row])):
            with self.assertLogs("homevisit.services.blocked_dates", level="WARNING"):
                blocked = _run(self.gateway().is_date_blocked(uuid4(), DAY))
        self.assertFalse(blocked)

    def test_staff_hours_fall_back_without_schedule(self):
        fallback = WorkingHours(start=_dt.time(9), end=_dt.time(15))
        with patch("homevisit.services.gateway.StaffRepository", _repo(get_schedule=None)):
            hours = _run(self.gateway().get_staff_working_hours(uuid4(), DayOfWeek.MONDAY, fallback))
        self.assertEqual(hours, fallback)

    def test_business_hours_by_weekday(self):
        schedule = SimpleNamespace(schedule={
            "0": {"is_open": True, "open_time": "10:00", "close_time": "18:00"},
            "6": {"is_open": False, "open_time": "00:00", "close_time": "00:00"},
        })
        with patch("homevisit.services.gateway.TenantRepository", _repo(get_business_hours=schedule)):
            gw = self.gateway()
            monday = _run(gw.get_business_hours(uuid4(), DayOfWeek.MONDAY))
            sunday = _run(gw.get_business_hours(uuid4(), DayOfWeek.SUNDAY))
            tuesday = _run(gw.get_business_hours(uuid4(), DayOfWeek.TUESDAY))
        self.assertEqual(monday, WorkingHours(start=_dt.time(10), end=_dt.time(18)))
        self.assertFalse(sunday.available)
        self.assertIsNone(tuesday)


class TestJsonHelpers(unittest.TestCase):
    def test_settings_defaults_when_unset(self):
        self.assertEqual(settings_from_json(None), HomeVisitSettings())

    def test_settings_values(self):
        settings = settings_from_json({"enabled": False, "dailyQuota": 4, "timeSlots": ["10:00", "14:00"]})
        self.assertEqual(settings, HomeVisitSettings(enabled=False, daily_quota=4, time_slots=("10:00", "14:00")))

    def test_settings_zero_or_invalid_fall_back(self):
        settings = settings_from_json({"dailyQuota": 0, "timeSlots": ["25:00", 9]})
        self.assertIsNone(settings.daily_quota)
        self.assertIsNone(settings.time_slots)
        self.assertTrue(settings.enabled)

    def test_hours_malformed(self):
        self.assertIsNone(hours_from_json({"open_time": "9", "close_time": "17:00"}))
        self.assertIsNone(hours_from_json(None))


class TestTimeHelpers(unittest.TestCase):
    def test_unknown_zone_is_utc(self):
        with self.assertLogs("homevisit.services.gateway", level="WARNING"):
            self.assertEqual(zone_for("Mars/Olympus"), ZoneInfo("UTC"))

    def test_day_bounds_half_open(self):
        start, end = day_bounds(DAY, ZoneInfo("Asia/Jakarta"))
        self.assertEqual(end - start, _dt.timedelta(days=1))
        self.assertEqual(start.hour, 0)
        self.assertEqual(start.utcoffset(), _dt.timedelta(hours=7))


if __name__ == "__main__":
    unittest.main()
