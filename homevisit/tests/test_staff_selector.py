"""Tests for BestStaffSelector."""
from __future__ import annotations

import asyncio
import datetime as _dt
import unittest

from homevisit.config import AvailabilityConfig
from homevisit.core.exceptions import ServiceNotFoundError, ValidationError
from homevisit.services.staff_selector import BestStaffSelector
from homevisit.services.types import BookingStatus
from homevisit.tests.fakes import FakeGateway, at

DAY = _dt.date(2024, 6, 10)


def _run(coro):
    return asyncio.run(coro)


class TestSelectBest(unittest.TestCase):
    def setUp(self):
        self.gw = FakeGateway()
        self.tenant_id = self.gw.tenant.id
        self.service = self.gw.add_service(requires_staff_assignment=True, travel_buffer_minutes=30)
        self.selector = BestStaffSelector(self.gw, AvailabilityConfig())

    def select(self, start="10:00", end="11:00"):
        return _run(
            self.selector.select_best(self.tenant_id, self.service.id, DAY, at(DAY, start), at(DAY, end))
        )

    def test_none_without_qualified_staff(self):
        self.assertIsNone(self.select())

    def test_lowest_load_wins(self):
        ana = self.gw.add_staff("Ana")
        bea = self.gw.add_staff("Bea")
        self.gw.book_staff(ana, at(DAY, "08:00"), 30)
        self.gw.book_staff(ana, at(DAY, "14:00"), 30)
        self.gw.book_staff(bea, at(DAY, "15:00"), 30)
        self.assertEqual(self.select(), bea)

    def test_tie_keeps_listing_order(self):
        ana = self.gw.add_staff("Ana")
        self.gw.add_staff("Bea")
        self.assertEqual(self.select(), ana)

    def test_pending_bookings_do_not_add_load(self):
        ana = self.gw.add_staff("Ana")
        bea = self.gw.add_staff("Bea")
        self.gw.book_staff(ana, at(DAY, "15:00"), 30, BookingStatus.PENDING)
        self.gw.book_staff(bea, at(DAY, "15:00"), 30, BookingStatus.CONFIRMED)
        self.assertEqual(self.select(), ana)

    def test_unavailable_staff_skipped_even_if_idle(self):
        ana = self.gw.add_staff("Ana")
        bea = self.gw.add_staff("Bea")
        self.gw.leave[ana.id] = [(DAY, DAY)]
        self.gw.book_staff(bea, at(DAY, "15:00"), 30)
        self.assertEqual(self.select(), bea)

    def test_degraded_staff_never_selected(self):
        ana = self.gw.add_staff("Ana")
        bea = self.gw.add_staff("Bea")
        self.gw.failing_staff.add(ana.id)
        self.gw.book_staff(bea, at(DAY, "15:00"), 30)
        self.assertEqual(self.select(), bea)

    def test_none_when_everybody_busy(self):
        ana = self.gw.add_staff("Ana")
        self.gw.book_staff(ana, at(DAY, "10:30"), 60)
        self.assertIsNone(self.select())

    def test_duration_from_slot_bounds_and_service_buffer(self):
        self.gw.add_staff("Ana")
        # 16:00-16:30 plus 30 min travel ends at 17:00, inside default hours
        self.assertIsNotNone(self.select("16:00", "16:30"))
        # 16:00-17:00 plus travel ends at 17:30
        self.assertIsNone(self.select("16:00", "17:00"))

    def test_opted_out_staff_never_selected(self):
        self.gw.add_staff("Ana", can_do_home_visit=False)
        bea = self.gw.add_staff("Bea")
        self.gw.book_staff(bea, at(DAY, "15:00"), 30)
        self.assertEqual(self.select(), bea)

    def test_staff_at_home_visit_cap_skipped(self):
        ana = self.gw.add_staff("Ana", max_daily_home_visits=1)
        bea = self.gw.add_staff("Bea")
        self.gw.book_staff(ana, at(DAY, "08:00"), 30, BookingStatus.PENDING, home_visit=True)
        self.gw.book_staff(bea, at(DAY, "14:00"), 30)
        self.gw.book_staff(bea, at(DAY, "15:00"), 30)
        self.assertEqual(self.select(), bea)

    def test_none_when_everybody_at_cap(self):
        ana = self.gw.add_staff("Ana", max_daily_home_visits=1)
        self.gw.book_staff(ana, at(DAY, "08:00"), 30, home_visit=True)
        self.assertIsNone(self.select())

    def test_reversed_or_empty_window_rejected(self):
        self.gw.add_staff("Ana")
        for start, end in (("11:00", "10:00"), ("10:00", "10:00")):
            with self.assertRaises(ValidationError):
                self.select(start, end)
        self.assertEqual(self.gw.calls["get_service"], 0)

    def test_unknown_service(self):
        with self.assertRaises(ServiceNotFoundError):
            _run(self.selector.select_best(self.tenant_id, self.tenant_id, DAY, at(DAY, "10:00"), at(DAY, "11:00")))


if __name__ == "__main__":
    unittest.main()
