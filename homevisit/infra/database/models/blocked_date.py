"""BlockedDate ORM: tenant-wide days with no home-visit bookings."""
from __future__ import annotations

import datetime as _dt
import uuid
from typing import Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from homevisit.infra.database.models.base import Base, TimestampMixin, _uuid_pk


class BlockedDate(Base, TimestampMixin):
    """
    Blocks [date_start, date_end] (date_end NULL = single day).
    recurring_pattern: None | "daily" | "weekly" | "monthly" | "yearly",
    repeating the range until recurring_until (NULL = forever).
    """

    __tablename__ = "blocked_dates"
    __table_args__ = (
        Index("ix_blocked_dates_tenant_start", "tenant_id", "date_start"),
        CheckConstraint(
            "recurring_pattern IS NULL OR recurring_pattern IN ('daily', 'weekly', 'monthly', 'yearly')",
            name="ck_blocked_dates_recurring_pattern",
        ),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
    )
    date_start: Mapped[_dt.date] = mapped_column(Date, nullable=False)
    date_end: Mapped[Optional[_dt.date]] = mapped_column(Date, nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    recurring_pattern: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    recurring_until: Mapped[Optional[_dt.date]] = mapped_column(Date, nullable=True)
