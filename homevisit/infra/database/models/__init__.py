"""
homevisit.infra.database.models – SQLAlchemy 2.0 ORM models.

Exports Base, mixins, and all model classes.
"""
from homevisit.infra.database.models.base import Base, TimestampMixin, _uuid_pk
from homevisit.infra.database.models.blocked_date import BlockedDate
from homevisit.infra.database.models.booking import Booking
from homevisit.infra.database.models.service import Service
from homevisit.infra.database.models.staff import Staff, StaffLeave, StaffSchedule, StaffService
from homevisit.infra.database.models.tenant import BusinessHours, Tenant

__all__ = [
    "Base",
    "TimestampMixin",
    "_uuid_pk",
    "Tenant",
    "BusinessHours",
    "Service",
    "Booking",
    "BlockedDate",
    "Staff",
    "StaffService",
    "StaffLeave",
    "StaffSchedule",
]
