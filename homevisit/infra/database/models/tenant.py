"""Tenant and BusinessHours ORM models."""
from __future__ import annotations

import uuid
from typing import Any, Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from homevisit.infra.database.models.base import Base, TimestampMixin, _uuid_pk


class Tenant(Base, TimestampMixin):
    """
    A business account. Only the fields the availability engine reads are mapped.

    home_visit_config: {"enabled": bool, "dailyQuota": int, "timeSlots": ["HH:MM", ...]}
    or NULL when the tenant never saved home-visit settings.
    """

    __tablename__ = "tenants"

    id: Mapped[uuid.UUID] = _uuid_pk()
    subdomain: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    business_name: Mapped[str] = mapped_column(String(255), nullable=False)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="Asia/Jakarta")
    home_visit_config: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONB, nullable=True)


class BusinessHours(Base, TimestampMixin):
    """
    Weekly opening hours, one row per tenant.

    schedule is keyed by DayOfWeek ordinal as a string ("0" = Monday):
    {"0": {"is_open": true, "open_time": "08:00", "close_time": "17:00"}, ...}
    """

    __tablename__ = "business_hours"

    id: Mapped[uuid.UUID] = _uuid_pk()
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    schedule: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, server_default="{}")
