"""SlotQuotaTracker: daily home-visit quota and occupied time slots for a tenant."""
from __future__ import annotations

import datetime as _dt
import logging
from typing import Optional, Sequence, Tuple
from uuid import UUID

from homevisit.config import AvailabilityConfig
from homevisit.core.exceptions import ExternalServiceError, exception_factory
from homevisit.services.gateway import BaseConstraintGateway
from homevisit.services.types import (
    ACTIVE_STATUSES,
    HomeVisitSettings,
    QuotaSnapshot,
    ServiceInfo,
)

logger = logging.getLogger(__name__)

QuotaUnavailableError = exception_factory(
    "QuotaUnavailableError", code="QUOTA_UNAVAILABLE", http_status=500, base=ExternalServiceError
)


class SlotQuotaTracker:
    def __init__(
        self,
        gateway: BaseConstraintGateway,
        config: Optional[AvailabilityConfig] = None,
    ) -> None:
        self._gateway = gateway
        self._config = config or AvailabilityConfig()

    def resolve_quota(self, settings: HomeVisitSettings, service: Optional[ServiceInfo]) -> int:
        """Tenant setting, then the service's own quota, then the configured default."""
        if settings.daily_quota:
            return settings.daily_quota
        if service is not None and service.daily_quota:
            return service.daily_quota
        return self._config.default_daily_quota

    def resolve_time_slots(
        self, settings: HomeVisitSettings, service: Optional[ServiceInfo]
    ) -> Tuple[str, ...]:
        """Same precedence as the quota. Duplicates collapse; result is sorted."""
        slots: Sequence[str] = (
            settings.time_slots
            or (service.time_slots if service is not None else None)
            or self._config.default_time_slots
        )
        return tuple(sorted(set(slots)))

    async def compute_remaining(
        self,
        tenant_id: UUID,
        day: _dt.date,
        service: Optional[ServiceInfo] = None,
        settings: Optional[HomeVisitSettings] = None,
    ) -> QuotaSnapshot:
        """Quota across every service of the tenant. Count failures are fatal."""
        try:
            if settings is None:
                settings = await self._gateway.get_home_visit_config(tenant_id)
            booked = await self._gateway.count_home_visit_bookings(tenant_id, day, ACTIVE_STATUSES)
            booked_times = await self._gateway.list_home_visit_booking_times(
                tenant_id, day, ACTIVE_STATUSES
            )
        except ExternalServiceError as exc:
            logger.error(
                "Home-visit quota check failed: %s", exc,
                extra={"tenant_id": str(tenant_id), "date": day.isoformat()},
            )
            raise QuotaUnavailableError("Failed to check availability", cause=exc) from exc

        quota = self.resolve_quota(settings, service)
        return QuotaSnapshot(
            daily_quota=quota,
            booked_count=booked,
            remaining_quota=max(0, quota - booked),
            booked_time_slots=frozenset(booked_times),
            time_slots=self.resolve_time_slots(settings, service),
        )
