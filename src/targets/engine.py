"""Sales target attainment engine.

Flow for one target:
- resolve the period key into a ``PeriodFilter``
- sum the PAID invoices inside it (per owner, or company-wide)
- express the sum as a percentage of the target amount

Everything here is read-only; the repositories are injected by the caller.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional

from django.conf import settings

from targets.exceptions import InvalidPeriodKey
from targets.periods import (
    AttributionFilter,
    PeriodFilter,
    recent_period_keys,
    resolve_period,
)
from targets.repositories import (
    InvoiceRepository,
    RevenueTotals,
    TargetRepository,
    UserDirectory,
)

logger = logging.getLogger(__name__)


def compute_percentage(target_amount, achieved_amount) -> float:
    """Return ``achieved / target * 100``; a zero target yields ``0.0``."""
    target = Decimal(str(target_amount))
    achieved = Decimal(str(achieved_amount))
    if target < 0 or achieved < 0:
        raise ValueError("Les montants ne peuvent pas etre negatifs.")
    if target == 0:
        return 0.0
    return float(achieved / target * 100)


# ────────────────────────────────────────────────────────────
# Results
# ────────────────────────────────────────────────────────────

@dataclass
class AttainmentResult:
    target_id: str
    owner_id: Optional[str]
    owner_name: str
    target_type: str
    period: str
    period_start: datetime
    period_end: datetime
    target_amount: Decimal
    achieved_amount: Decimal
    invoice_count: int
    percentage: float

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class SkippedTarget:
    target_id: str
    owner_id: Optional[str]
    period: str
    error: str

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class AttainmentReport:
    target_type: str
    periods: Optional[list[str]] = None
    results: list[AttainmentResult] = field(default_factory=list)
    skipped: list[SkippedTarget] = field(default_factory=list)


# ────────────────────────────────────────────────────────────
# Aggregation
# ────────────────────────────────────────────────────────────

class RevenueAggregator:
    """Sums PAID invoice amounts inside a period window."""

    def __init__(self, invoices: InvoiceRepository) -> None:
        self.invoices = invoices

    def achieved(self, period: PeriodFilter, attribution: AttributionFilter) -> RevenueTotals:
        return self.invoices.aggregate_paid(period, attribution)

    def achieved_for(self, target_period: str, target_type: str, owner_id=None) -> RevenueTotals:
        """Convenience wrapper taking a raw period key and optional owner."""
        period = resolve_period(target_period, target_type)
        return self.achieved(period, AttributionFilter(owner_id=owner_id))


class AttainmentReportAssembler:
    """Builds attainment rows for users or for the company."""

    def __init__(self, targets: TargetRepository, invoices: InvoiceRepository) -> None:
        self.targets = targets
        self.aggregator = RevenueAggregator(invoices)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def for_target(self, target) -> AttainmentResult:
        """Compute attainment for a single target.

        Raises ``InvalidPeriodKey`` when the stored period key is malformed.
        Company-wide targets are aggregated without an attribution filter.
        """
        period = resolve_period(target.target_period, target.target_type)
        if target.owner_id is None:
            attribution = AttributionFilter.company()
        else:
            attribution = AttributionFilter(owner_id=target.owner_id)
        totals = self.aggregator.achieved(period, attribution)

        owner_name = "Entreprise"
        if target.owner_id is not None:
            owner_name = target.owner.get_full_name() or target.owner.email

        return AttainmentResult(
            target_id=str(target.pk),
            owner_id=str(target.owner_id) if target.owner_id else None,
            owner_name=owner_name,
            target_type=target.target_type,
            period=target.target_period,
            period_start=period.start,
            period_end=period.end,
            target_amount=target.target_amount,
            achieved_amount=totals.amount,
            invoice_count=totals.count,
            percentage=compute_percentage(target.target_amount, totals.amount),
        )

    def build(
        self,
        users: Iterable,
        target_type: str,
        periods: Optional[int] = None,
        today: Optional[date] = None,
    ) -> AttainmentReport:
        """Attainment for each user's active targets of ``target_type``.

        ``periods`` restricts the report to that many most recent period keys.
        Users keep the order they were given in; each user's rows are sorted
        by period.
        """
        keys = self._period_keys(target_type, periods, today)
        report = AttainmentReport(target_type=target_type, periods=keys)
        for user in users:
            targets = self.targets.list_targets(
                owner_id=user.pk,
                target_type=target_type,
                periods=keys,
            )
            self._collect(report, targets)
        return report

    def build_company(
        self,
        target_type: str,
        periods: Optional[int] = None,
        today: Optional[date] = None,
    ) -> AttainmentReport:
        keys = self._period_keys(target_type, periods, today)
        report = AttainmentReport(target_type=target_type, periods=keys)
        targets = self.targets.list_targets(company=True, target_type=target_type, periods=keys)
        self._collect(report, targets)
        return report

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _period_keys(target_type, periods, today):
        if periods is None:
            return None
        return recent_period_keys(target_type, periods, today=today)

    def _collect(self, report: AttainmentReport, targets) -> None:
        for target in targets:
            try:
                report.results.append(self.for_target(target))
            except InvalidPeriodKey as exc:
                logger.warning(
                    "Objectif %s ignore: %s",
                    target.pk,
                    exc,
                )
                report.skipped.append(
                    SkippedTarget(
                        target_id=str(target.pk),
                        owner_id=str(target.owner_id) if target.owner_id else None,
                        period=target.target_period,
                        error=str(exc),
                    )
                )


def build_assembler(using: Optional[str] = None) -> AttainmentReportAssembler:
    """Wire an assembler to the configured reporting database."""
    using = using or settings.TARGET_REPORT_DATABASE
    return AttainmentReportAssembler(
        targets=TargetRepository(using=using),
        invoices=InvoiceRepository(using=using),
    )


def build_user_directory(using: Optional[str] = None) -> UserDirectory:
    return UserDirectory(using=using or settings.TARGET_REPORT_DATABASE)
