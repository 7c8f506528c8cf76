"""Service ORM model (bookable offering, with home-visit fallbacks)."""
from __future__ import annotations

import uuid
from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from homevisit.infra.database.models.base import Base, TimestampMixin, _uuid_pk


class Service(Base, TimestampMixin):
    """
    service_type: "on_premise" | "home_visit" | "both"
    daily_home_visit_quota / home_visit_time_slots only apply when the tenant
    has no home_visit_config of its own.
    """

    __tablename__ = "services"
    __table_args__ = (
        Index("ix_services_tenant_id", "tenant_id"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    service_type: Mapped[str] = mapped_column(String(32), nullable=False, default="on_premise")
    requires_staff_assignment: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    home_visit_min_buffer_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    daily_home_visit_quota: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    home_visit_time_slots: Mapped[Optional[List[str]]] = mapped_column(JSONB, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
