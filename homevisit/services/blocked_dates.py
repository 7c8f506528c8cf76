"""Blocked-date coverage: does a (possibly recurring) blocked range cover a day?

Works on anything shaped like the BlockedDate ORM row (date_start, date_end,
recurring_pattern, recurring_until), so the gateway can filter rows after a
coarse SQL prefilter and tests can pass plain namespaces.
"""
from __future__ import annotations

import calendar
import datetime as _dt
import logging
from typing import Any, Iterable, Iterator, List, Optional

logger = logging.getLogger(__name__)

RECURRING_PATTERNS = ("daily", "weekly", "monthly", "yearly")


def recurrence_of(record: Any) -> Optional[str]:
    """Normalised recurring_pattern. An unknown value is logged and read as a one-off range."""
    raw = record.recurring_pattern
    pattern = (raw or "").strip().lower()
    if not pattern:
        return None
    if pattern not in RECURRING_PATTERNS:
        logger.warning(
            "Unknown recurring_pattern %r on blocked date %s, treating it as one-off",
            raw, getattr(record, "id", None),
        )
        return None
    return pattern


def is_blocked_on(record: Any, day: _dt.date) -> bool:
    return _covers(record, recurrence_of(record), day)


def blocked_days(records: Iterable[Any], start: _dt.date, end: _dt.date) -> List[_dt.date]:
    """Every day in [start, end] covered by at least one record, ascending."""
    rows = [(r, recurrence_of(r)) for r in records]
    out: List[_dt.date] = []
    day = start
    while day <= end:
        if any(_covers(r, pattern, day) for r, pattern in rows):
            out.append(day)
        day += _dt.timedelta(days=1)
    return out


def _covers(record: Any, pattern: Optional[str], day: _dt.date) -> bool:
    start: _dt.date = record.date_start
    if day < start:
        return False
    span = max(0, ((record.date_end or start) - start).days)
    if not pattern:
        return day <= start + _dt.timedelta(days=span)

    until: Optional[_dt.date] = record.recurring_until
    for occurrence in _occurrences_back(start, day, pattern):
        if (day - occurrence).days > span:
            return False
        if until is None or occurrence <= until:
            return True
    return False


def _occurrences_back(start: _dt.date, day: _dt.date, pattern: str) -> Iterator[_dt.date]:
    """Occurrence start dates <= day, latest first, never before start."""
    if pattern == "daily":
        occ = day
        while occ >= start:
            yield occ
            occ -= _dt.timedelta(days=1)
    elif pattern == "weekly":
        occ = day - _dt.timedelta(days=(day - start).days % 7)
        while occ >= start:
            yield occ
            occ -= _dt.timedelta(days=7)
    elif pattern == "monthly":
        year, month = day.year, day.month
        while True:
            occ = _clamped(year, month, start.day)
            if occ < start:
                return
            if occ <= day:
                yield occ
            year, month = (year, month - 1) if month > 1 else (year - 1, 12)
    else:
        year = day.year
        while True:
            occ = _clamped(year, start.month, start.day)
            if occ < start:
                return
            if occ <= day:
                yield occ
            year -= 1


def _clamped(year: int, month: int, day: int) -> _dt.date:
    # 31st -> last day of shorter months, Feb 29 -> Feb 28
    return _dt.date(year, month, min(day, calendar.monthrange(year, month)[1]))
