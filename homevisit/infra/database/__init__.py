"""
homevisit.infra.database – PostgreSQL async engine, session, models and repositories.

Public API
──────────
  build_engine, build_session_factory, init_db, close_engine, ensure_database_exists
  Base and ORM models (Tenant, Service, Booking, Staff, ...)
  Repositories (TenantRepository, ServiceRepository, BookingRepository, ...)
"""
from homevisit.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)
from homevisit.infra.database.models import (
    Base,
    BlockedDate,
    Booking,
    BusinessHours,
    Service,
    Staff,
    StaffLeave,
    StaffSchedule,
    StaffService,
    Tenant,
)
from homevisit.infra.database.repositories import (
    BaseRepository,
    BlockedDateRepository,
    BookingRepository,
    ServiceRepository,
    StaffRepository,
    TenantRepository,
)

__all__ = [
    "build_engine",
    "build_session_factory",
    "init_db",
    "close_engine",
    "ensure_database_exists",
    "Base",
    "Tenant",
    "BusinessHours",
    "Service",
    "Booking",
    "BlockedDate",
    "Staff",
    "StaffService",
    "StaffLeave",
    "StaffSchedule",
    "BaseRepository",
    "TenantRepository",
    "ServiceRepository",
    "BookingRepository",
    "StaffRepository",
    "BlockedDateRepository",
]
