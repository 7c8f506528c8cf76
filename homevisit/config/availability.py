"""
homevisit.config.availability – tunables for slot computation and staff matching.

Env vars: HOME_VISIT_DEFAULT_QUOTA, HOME_VISIT_DEFAULT_TIME_SLOTS,
STAFF_DEFAULT_WORK_START, STAFF_DEFAULT_WORK_END, AVAILABILITY_MAX_CONCURRENCY,
AVAILABILITY_CHECK_TIMEOUT, STAFF_CAPABILITY_WHEN_UNMAPPED, DEGRADED_STAFF_POLICY,
AVAILABLE_DATES_MAX_SPAN_DAYS, STAFF_MAX_DAILY_HOME_VISITS.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Tuple

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_CAPABILITY_VALUES = frozenset({"allow", "deny"})
_DEGRADED_VALUES = frozenset({"exclude", "include"})


def is_hhmm(value: object) -> bool:
    return isinstance(value, str) and bool(_HHMM.match(value))


@dataclass(frozen=True)
class AvailabilityConfig:
    default_daily_quota: int = 3
    default_time_slots: Tuple[str, ...] = ("09:00", "13:00", "16:00")
    default_work_start: str = "08:00"
    default_work_end: str = "17:00"
    max_concurrent_checks: int = 10
    """Cap on simultaneous staff checks per request (slots x staff fan-out)."""
    staff_check_timeout_seconds: float = 5.0
    """A single staff check slower than this is reported as DEGRADED."""
    capability_when_unmapped: str = "allow"
    """Staff with no staff_services row for a service: "allow" counts them as
    qualified (legacy tenants that never configured mappings), "deny" does not."""
    degraded_staff_policy: str = "exclude"
    """"exclude": a DEGRADED staff check never makes a slot available.
    "include": DEGRADED staff are treated as not blocking the slot."""
    available_dates_max_span_days: int = 62
    default_max_daily_home_visits_per_staff: int = 5
    """Per-staff daily home-visit cap for staff whose own config sets none."""

    def __post_init__(self) -> None:
        if not isinstance(self.default_daily_quota, int) or self.default_daily_quota < 1:
            raise ValueError(f"default_daily_quota must be a positive integer, got {self.default_daily_quota!r}")
        if not self.default_time_slots or not all(is_hhmm(s) for s in self.default_time_slots):
            raise ValueError(f"default_time_slots must be non-empty HH:MM strings, got {self.default_time_slots!r}")
        if not is_hhmm(self.default_work_start) or not is_hhmm(self.default_work_end):
            raise ValueError("default_work_start/default_work_end must be HH:MM")
        if self.default_work_start >= self.default_work_end:
            raise ValueError("default_work_start must be before default_work_end")
        if not isinstance(self.max_concurrent_checks, int) or self.max_concurrent_checks < 1:
            raise ValueError(f"max_concurrent_checks must be >= 1, got {self.max_concurrent_checks!r}")
        if self.staff_check_timeout_seconds <= 0:
            raise ValueError(f"staff_check_timeout_seconds must be > 0, got {self.staff_check_timeout_seconds!r}")
        if self.capability_when_unmapped not in _CAPABILITY_VALUES:
            raise ValueError(f"capability_when_unmapped must be one of {sorted(_CAPABILITY_VALUES)}")
        if self.degraded_staff_policy not in _DEGRADED_VALUES:
            raise ValueError(f"degraded_staff_policy must be one of {sorted(_DEGRADED_VALUES)}")
        if not isinstance(self.available_dates_max_span_days, int) or self.available_dates_max_span_days < 1:
            raise ValueError("available_dates_max_span_days must be a positive integer")
        if (
            not isinstance(self.default_max_daily_home_visits_per_staff, int)
            or self.default_max_daily_home_visits_per_staff < 1
        ):
            raise ValueError("default_max_daily_home_visits_per_staff must be a positive integer")

    @classmethod
    def from_env(cls, **overrides: object) -> AvailabilityConfig:
        def _get(attr: str, env: str, default: str) -> str:
            v = overrides.get(attr)
            return str(v) if v is not None else os.environ.get(env, default)

        raw_slots = overrides.get("default_time_slots")
        if raw_slots is None:
            raw_slots = os.environ.get("HOME_VISIT_DEFAULT_TIME_SLOTS", "09:00,13:00,16:00")
        if isinstance(raw_slots, str):
            raw_slots = [s.strip() for s in raw_slots.split(",") if s.strip()]

        return cls(
            default_daily_quota=int(_get("default_daily_quota", "HOME_VISIT_DEFAULT_QUOTA", "3")),
            default_time_slots=tuple(raw_slots),  # type: ignore[arg-type]
            default_work_start=_get("default_work_start", "STAFF_DEFAULT_WORK_START", "08:00"),
            default_work_end=_get("default_work_end", "STAFF_DEFAULT_WORK_END", "17:00"),
            max_concurrent_checks=int(_get("max_concurrent_checks", "AVAILABILITY_MAX_CONCURRENCY", "10")),
            staff_check_timeout_seconds=float(
                _get("staff_check_timeout_seconds", "AVAILABILITY_CHECK_TIMEOUT", "5")
            ),
            capability_when_unmapped=_get(
                "capability_when_unmapped", "STAFF_CAPABILITY_WHEN_UNMAPPED", "allow"
            ).strip().lower(),
            degraded_staff_policy=_get(
                "degraded_staff_policy", "DEGRADED_STAFF_POLICY", "exclude"
            ).strip().lower(),
            available_dates_max_span_days=int(
                _get("available_dates_max_span_days", "AVAILABLE_DATES_MAX_SPAN_DAYS", "62")
            ),
            default_max_daily_home_visits_per_staff=int(
                _get("default_max_daily_home_visits_per_staff", "STAFF_MAX_DAILY_HOME_VISITS", "5")
            ),
        )


def load_availability_config(**overrides: object) -> AvailabilityConfig:
    return AvailabilityConfig.from_env(**overrides)
