"""Service layer: constraint gateway, staff evaluator, quota tracker, availability composer, staff selector."""
from homevisit.services.availability_service import AvailabilityService
from homevisit.services.gateway import BaseConstraintGateway, SqlConstraintGateway
from homevisit.services.slot_quota import QuotaUnavailableError, SlotQuotaTracker
from homevisit.services.staff_availability import StaffAvailabilityEvaluator
from homevisit.services.staff_selector import BestStaffSelector

__all__ = [
    "BaseConstraintGateway",
    "SqlConstraintGateway",
    "StaffAvailabilityEvaluator",
    "SlotQuotaTracker",
    "QuotaUnavailableError",
    "AvailabilityService",
    "BestStaffSelector",
]
