"""Booking ORM model (read-only from the availability engine)."""
from __future__ import annotations

import datetime as _dt
import uuid
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from homevisit.infra.database.models.base import Base, TimestampMixin, _uuid_pk


class Booking(Base, TimestampMixin):
    """An appointment. status: pending | confirmed | cancelled | completed."""

    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_tenant_scheduled", "tenant_id", "scheduled_at"),
        Index("ix_bookings_staff_scheduled", "staff_id", "scheduled_at"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
    )
    service_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("services.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Set at booking commit from the best-staff selection (nullable until then)
    staff_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("staff.id", ondelete="SET NULL"),
        nullable=True,
    )
    scheduled_at: Mapped[_dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    is_home_visit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="pending")
