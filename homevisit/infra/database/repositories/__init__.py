"""Repositories for the homevisit database."""
from homevisit.infra.database.repositories.base import BaseRepository
from homevisit.infra.database.repositories.blocked_date import BlockedDateRepository
from homevisit.infra.database.repositories.booking import BookingRepository
from homevisit.infra.database.repositories.service import ServiceRepository
from homevisit.infra.database.repositories.staff import StaffRepository
from homevisit.infra.database.repositories.tenant import TenantRepository

__all__ = [
    "BaseRepository",
    "TenantRepository",
    "ServiceRepository",
    "BookingRepository",
    "StaffRepository",
    "BlockedDateRepository",
]
