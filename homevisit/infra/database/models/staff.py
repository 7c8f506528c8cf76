"""Staff ORM models: staff, service capability, leave and weekly schedule."""
from __future__ import annotations

import datetime as _dt
import uuid
from typing import Any, Optional

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Index,
    SmallInteger,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from homevisit.infra.database.models.base import Base, TimestampMixin, _uuid_pk


class Staff(Base, TimestampMixin):
    """home_visit_config: {"canDoHomeVisit": bool, "maxDailyHomeVisits": int}; NULL = defaults."""

    __tablename__ = "staff"
    __table_args__ = (
        Index("ix_staff_tenant_active", "tenant_id", "is_active"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    home_visit_config: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONB, nullable=True)


class StaffService(Base, TimestampMixin):
    """Whether a staff member can perform a service. A missing row is governed
    by AvailabilityConfig.capability_when_unmapped."""

    __tablename__ = "staff_services"
    __table_args__ = (
        UniqueConstraint("staff_id", "service_id", name="uq_staff_services_staff_service"),
        Index("ix_staff_services_service_id", "service_id"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()
    staff_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("staff.id", ondelete="CASCADE"),
        nullable=False,
    )
    service_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("services.id", ondelete="CASCADE"),
        nullable=False,
    )
    can_perform: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_specialist: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class StaffLeave(Base, TimestampMixin):
    """Inclusive [date_start, date_end] range of unavailability."""

    __tablename__ = "staff_leave"
    __table_args__ = (
        Index("ix_staff_leave_staff_dates", "staff_id", "date_start", "date_end"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()
    staff_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("staff.id", ondelete="CASCADE"),
        nullable=False,
    )
    date_start: Mapped[_dt.date] = mapped_column(Date, nullable=False)
    date_end: Mapped[_dt.date] = mapped_column(Date, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class StaffSchedule(Base, TimestampMixin):
    """Per-weekday working hours override. day_of_week: 0 = Monday ... 6 = Sunday."""

    __tablename__ = "staff_schedules"
    __table_args__ = (
        UniqueConstraint("staff_id", "day_of_week", name="uq_staff_schedules_staff_day"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()
    staff_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("staff.id", ondelete="CASCADE"),
        nullable=False,
    )
    day_of_week: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    start_time: Mapped[_dt.time] = mapped_column(Time, nullable=False)
    end_time: Mapped[_dt.time] = mapped_column(Time, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
