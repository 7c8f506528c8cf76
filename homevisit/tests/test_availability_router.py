"""Tests for the bookings availability router (TestClient, in-memory gateway)."""
from __future__ import annotations

import datetime as _dt
import unittest
from uuid import uuid4

from fastapi.testclient import TestClient

from homevisit.api.dependencies import get_gateway
from homevisit.api.main import app
from homevisit.api.routers import availability
from homevisit.services.types import HomeVisitSettings, ServiceType
from homevisit.tests.fakes import FakeGateway, at

DAY = _dt.date(2024, 6, 10)
BASE = "/api/v1/bookings"


class _RouterCase(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        availability.limiter.enabled = False

    @classmethod
    def tearDownClass(cls):
        availability.limiter.enabled = True

    def setUp(self):
        self.gw = FakeGateway()
        self.gw.settings = HomeVisitSettings(daily_quota=3, time_slots=("09:00", "13:00", "16:00"))
        self.service = self.gw.add_service(name="Home Massage", duration=60)
        app.dependency_overrides[get_gateway] = lambda: self.gw
        self.client = TestClient(app, raise_server_exceptions=False)
        self.headers = {"X-Tenant-Id": str(self.gw.tenant.id)}

    def tearDown(self):
        app.dependency_overrides.clear()

    def get(self, path, headers=None, **params):
        return self.client.get(f"{BASE}{path}", params=params, headers=self.headers if headers is None else headers)


class TestHomeVisitAvailability(_RouterCase):
    def test_camel_case_body(self):
        resp = self.get("/home-visit-availability", serviceId=str(self.service.id), date="2024-06-10")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["date"], "2024-06-10")
        self.assertEqual(body["serviceId"], str(self.service.id))
        self.assertEqual(body["serviceName"], "Home Massage")
        self.assertEqual(body["serviceDuration"], 60)
        self.assertTrue(body["isHomeVisitSupported"])
        self.assertFalse(body["requiresStaff"])
        self.assertEqual((body["dailyQuota"], body["bookedCount"], body["remainingQuota"]), (3, 0, 3))
        self.assertEqual(body["availableSlots"], 3)
        self.assertEqual(body["message"], "3 slot(s) available")
        self.assertNotIn("isBlocked", body)
        slot = body["slots"][0]
        self.assertEqual(slot["time"], "09:00")
        self.assertEqual(_dt.datetime.fromisoformat(slot["start"]), at(DAY, "09:00"))
        self.assertFalse(slot["isBooked"])
        self.assertEqual(slot["staffAvailable"], 0)
        self.assertEqual(slot["staffNames"], [])

    def test_tenant_from_query_by_subdomain(self):
        resp = self.get(
            "/home-visit-availability", headers={},
            serviceId=str(self.service.id), date="2024-06-10", tenantId=self.gw.tenant.subdomain,
        )
        self.assertEqual(resp.status_code, 200)

    def test_missing_tenant_is_400(self):
        resp = self.get("/home-visit-availability", headers={}, serviceId=str(self.service.id), date="2024-06-10")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["code"], "VALIDATION_ERROR")

    def test_unknown_tenant_is_404(self):
        resp = self.get(
            "/home-visit-availability", headers={"X-Tenant-Id": "nobody"},
            serviceId=str(self.service.id), date="2024-06-10",
        )
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["code"], "TENANT_NOT_FOUND")

    def test_missing_or_malformed_params_are_400(self):
        cases = [
            {"date": "2024-06-10"},
            {"serviceId": "not-a-uuid", "date": "2024-06-10"},
            {"serviceId": str(self.service.id)},
            {"serviceId": str(self.service.id), "date": "10/06/2024"},
        ]
        for params in cases:
            with self.subTest(params=params):
                resp = self.get("/home-visit-availability", **params)
                self.assertEqual(resp.status_code, 400)
                self.assertIn("error", resp.json())

    def test_unknown_service_is_404(self):
        resp = self.get("/home-visit-availability", serviceId=str(uuid4()), date="2024-06-10")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["code"], "SERVICE_NOT_FOUND")

    def test_unsupported_service_is_400_with_flag(self):
        service = self.gw.add_service(service_type=ServiceType.ON_PREMISE)
        resp = self.get("/home-visit-availability", serviceId=str(service.id), date="2024-06-10")
        self.assertEqual(resp.status_code, 400)
        body = resp.json()
        self.assertFalse(body["isHomeVisitSupported"])
        self.assertEqual(body["slots"], [])

    def test_blocked_date(self):
        self.gw.blocked.add(DAY)
        resp = self.get("/home-visit-availability", serviceId=str(self.service.id), date="2024-06-10")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertTrue(body["isBlocked"])
        self.assertEqual(body["slots"], [])
        self.assertEqual(body["message"], "This date is blocked")

    def test_quota_failure_is_500(self):
        self.gw.fail.add("count_home_visit_bookings")
        resp = self.get("/home-visit-availability", serviceId=str(self.service.id), date="2024-06-10")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json()["code"], "QUOTA_UNAVAILABLE")


class TestStaffEndpoints(_RouterCase):
    def setUp(self):
        super().setUp()
        self.staffed = self.gw.add_service(requires_staff_assignment=True)

    def test_roster(self):
        ana = self.gw.add_staff("Ana", is_specialist=True)
        bea = self.gw.add_staff("Bea")
        self.gw.leave[bea.id] = [(DAY, DAY)]
        resp = self.get(
            "/home-visit-availability/staff", serviceId=str(self.staffed.id), date="2024-06-10", time="09:00"
        )
        self.assertEqual(resp.status_code, 200)
        staff = resp.json()["staff"]
        self.assertEqual([s["staffId"] for s in staff], [str(ana.id), str(bea.id)])
        self.assertEqual(staff[0]["status"], "available")
        self.assertTrue(staff[0]["isSpecialist"])
        self.assertEqual(staff[1]["status"], "unavailable")
        self.assertEqual(staff[1]["reason"], "on_leave")

    def test_roster_requires_time(self):
        resp = self.get("/home-visit-availability/staff", serviceId=str(self.staffed.id), date="2024-06-10")
        self.assertEqual(resp.status_code, 400)

    def test_best_staff(self):
        self.gw.add_staff("Ana")
        resp = self.get(
            "/home-visit-availability/best-staff", serviceId=str(self.staffed.id), date="2024-06-10", time="09:00"
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["staffName"], "Ana")

    def test_best_staff_conflict_when_nobody_free(self):
        resp = self.get(
            "/home-visit-availability/best-staff", serviceId=str(self.staffed.id), date="2024-06-10", time="09:00"
        )
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["code"], "STAFF_UNAVAILABLE")

    def test_best_staff_optional_for_unstaffed_service(self):
        resp = self.get(
            "/home-visit-availability/best-staff", serviceId=str(self.service.id), date="2024-06-10", time="09:00"
        )
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(resp.json()["staffId"])


class TestAvailableDates(_RouterCase):
    def test_lists_unblocked_days(self):
        self.gw.blocked.add(_dt.date(2024, 6, 11))
        resp = self.get("/available-dates", start="2024-06-10", end="2024-06-12")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["dates"], ["2024-06-10", "2024-06-12"])

    def test_range_too_long(self):
        resp = self.get("/available-dates", start="2024-06-01", end="2024-09-01")
        self.assertEqual(resp.status_code, 400)


class TestHealth(unittest.TestCase):
    def test_health(self):
        resp = TestClient(app).get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "ok"})


if __name__ == "__main__":
    unittest.main()
