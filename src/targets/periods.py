"""Period keys and their calendar boundaries.

Period key formats per target type:

- MONTHLY   ``YYYY-MM``  (``2025-07``)
- QUARTERLY ``YYYY-Qn``  (``2025-Q3``), quarters start in months 1/4/7/10
- YEARLY    ``YYYY``     (``2025``)

Boundaries are inclusive and expressed as aware datetimes in the project
time zone; the end is the last day at 23:59:59.999 so that invoices stamped
anywhere within the last day are captured.
"""
from __future__ import annotations

import re
from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from django.utils import timezone

from targets.exceptions import InvalidPeriodKey

MONTHLY = "MONTHLY"
QUARTERLY = "QUARTERLY"
YEARLY = "YEARLY"
TARGET_TYPES = (MONTHLY, QUARTERLY, YEARLY)

_MONTHLY_RE = re.compile(r"([0-9]{4})-([0-9]{2})")
_QUARTERLY_RE = re.compile(r"([0-9]{4})-Q([1-4])")
_YEARLY_RE = re.compile(r"([0-9]{4})")

END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class PeriodFilter:
    """Inclusive ``[start, end]`` invoice-date window for one period key."""

    key: str
    target_type: str
    start: datetime
    end: datetime


@dataclass(frozen=True)
class AttributionFilter:
    """Which salesperson's invoices count. ``owner_id=None`` means company-wide."""

    owner_id: Optional[str] = None

    @classmethod
    def company(cls) -> "AttributionFilter":
        return cls(owner_id=None)

    @property
    def is_company(self) -> bool:
        return self.owner_id is None


def parse_period(target_period: str, target_type: str) -> tuple[date, date]:
    """Return the first and last calendar day covered by ``target_period``."""
    if not isinstance(target_period, str):
        raise InvalidPeriodKey(target_period, target_type, "une chaine est attendue")

    if target_type == MONTHLY:
        match = _MONTHLY_RE.fullmatch(target_period)
        if not match:
            raise InvalidPeriodKey(target_period, target_type, "format attendu YYYY-MM")
        year, month = int(match.group(1)), int(match.group(2))
        if not 1 <= month <= 12:
            raise InvalidPeriodKey(target_period, target_type, "mois hors limites")
        first_month, last_month = month, month
    elif target_type == QUARTERLY:
        match = _QUARTERLY_RE.fullmatch(target_period)
        if not match:
            raise InvalidPeriodKey(target_period, target_type, "format attendu YYYY-Qn")
        year, quarter = int(match.group(1)), int(match.group(2))
        first_month = (quarter - 1) * 3 + 1
        last_month = first_month + 2
    elif target_type == YEARLY:
        match = _YEARLY_RE.fullmatch(target_period)
        if not match:
            raise InvalidPeriodKey(target_period, target_type, "format attendu YYYY")
        year = int(match.group(1))
        first_month, last_month = 1, 12
    else:
        raise InvalidPeriodKey(target_period, target_type, "type d'objectif inconnu")

    if year < 1:
        raise InvalidPeriodKey(target_period, target_type, "annee hors limites")

    first_day = date(year, first_month, 1)
    last_day = date(year, last_month, monthrange(year, last_month)[1])
    return first_day, last_day


def resolve_period(target_period: str, target_type: str, tz=None) -> PeriodFilter:
    """Resolve a period key into an inclusive, timezone-aware date range."""
    first_day, last_day = parse_period(target_period, target_type)
    tz = tz or timezone.get_current_timezone()
    return PeriodFilter(
        key=target_period,
        target_type=target_type,
        start=timezone.make_aware(datetime.combine(first_day, time.min), tz),
        end=timezone.make_aware(datetime.combine(last_day, END_OF_DAY), tz),
    )


def period_key_for(target_type: str, day: date) -> str:
    """Return the period key of ``target_type`` that contains ``day``."""
    if target_type == MONTHLY:
        return f"{day.year:04d}-{day.month:02d}"
    if target_type == QUARTERLY:
        return f"{day.year:04d}-Q{(day.month - 1) // 3 + 1}"
    if target_type == YEARLY:
        return f"{day.year:04d}"
    raise ValueError(f"Type d'objectif inconnu: {target_type}")


def current_period_key(target_type: str) -> str:
    return period_key_for(target_type, timezone.localdate())


def recent_period_keys(target_type: str, count: int, today: Optional[date] = None) -> list[str]:
    """Return the ``count`` most recent period keys, oldest first.

    The window ends with the period containing ``today``.
    """
    if count < 1:
        raise ValueError("Le nombre de periodes doit etre au moins 1.")
    today = today or timezone.localdate()

    if target_type == MONTHLY:
        index = today.year * 12 + today.month - 1
        return [
            f"{i // 12:04d}-{i % 12 + 1:02d}"
            for i in range(index - count + 1, index + 1)
        ]
    if target_type == QUARTERLY:
        index = today.year * 4 + (today.month - 1) // 3
        return [
            f"{i // 4:04d}-Q{i % 4 + 1}"
            for i in range(index - count + 1, index + 1)
        ]
    if target_type == YEARLY:
        return [f"{year:04d}" for year in range(today.year - count + 1, today.year + 1)]
    raise ValueError(f"Type d'objectif inconnu: {target_type}")
