"""Data-access handles used by the attainment engine.

Each repository is bound to one database alias at construction time and is
handed to the engine by the caller (a view or a Celery task). Nothing here
keeps module-level state.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import DEFAULT_DB_ALIAS, DatabaseError
from django.db.models import Count, Sum

from targets.exceptions import DataAccessError
from targets.periods import AttributionFilter, PeriodFilter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RevenueTotals:
    amount: Decimal = Decimal("0")
    count: int = 0


@contextmanager
def _data_access(operation: str):
    try:
        yield
    except DatabaseError as exc:
        logger.error("Echec de la requete %s: %s", operation, exc)
        raise DataAccessError(f"Acces aux donnees impossible ({operation}).") from exc


class TargetRepository:
    """Read access to persisted sales targets."""

    def __init__(self, using: str = DEFAULT_DB_ALIAS) -> None:
        self.using = using

    def list_targets(
        self,
        owner_id=None,
        company: bool = False,
        target_type: Optional[str] = None,
        active_only: bool = True,
        periods: Optional[Iterable[str]] = None,
    ) -> list:
        """Targets ordered by period then creation.

        ``company=True`` selects company-wide targets (no owner) and ignores
        ``owner_id``.
        """
        from targets.models import Target

        qs = Target.objects.using(self.using).select_related("owner")
        if company:
            qs = qs.filter(owner__isnull=True)
        elif owner_id is not None:
            qs = qs.filter(owner_id=owner_id)
        if target_type:
            qs = qs.filter(target_type=target_type)
        if active_only:
            qs = qs.filter(is_active=True)
        if periods is not None:
            qs = qs.filter(target_period__in=list(periods))

        with _data_access("targets"):
            return list(qs.order_by("target_period", "created_at"))


class InvoiceRepository:
    """Aggregations over PAID invoices."""

    def __init__(self, using: str = DEFAULT_DB_ALIAS) -> None:
        self.using = using

    def aggregate_paid(
        self,
        period_filter: PeriodFilter,
        attribution_filter: AttributionFilter,
    ) -> RevenueTotals:
        from sales.models import Invoice

        qs = Invoice.objects.using(self.using).filter(
            status=Invoice.Status.PAID,
            invoice_date__gte=period_filter.start,
            invoice_date__lte=period_filter.end,
        )
        if not attribution_filter.is_company:
            qs = qs.filter(created_by_id=attribution_filter.owner_id)

        with _data_access("invoices"):
            agg = qs.aggregate(amount=Sum("total_amount"), count=Count("id"))
        return RevenueTotals(
            amount=agg["amount"] or Decimal("0"),
            count=agg["count"] or 0,
        )


class UserDirectory:
    """Lookup of the users that can hold sales targets."""

    def __init__(self, using: str = DEFAULT_DB_ALIAS) -> None:
        self.using = using

    def _users(self):
        from django.contrib.auth import get_user_model

        return get_user_model().objects.using(self.using)

    def eligible_users(self, roles: Optional[Iterable[str]] = None) -> list:
        if roles is None:
            roles = settings.TARGET_REPORTING_ROLES
        qs = self._users().filter(is_active=True, role__in=list(roles))
        with _data_access("users"):
            return list(qs.order_by("first_name", "last_name", "email"))

    def get_user(self, user_id):
        """Return the user or ``None`` for an unknown or malformed id."""
        try:
            with _data_access("users"):
                return self._users().filter(pk=user_id).first()
        except (ValueError, ValidationError):
            return None

    def users_by_ids(self, user_ids: Iterable) -> list:
        """Users in the order of ``user_ids``; unknown ids are dropped."""
        user_ids = list(user_ids)
        with _data_access("users"):
            found = {str(u.pk): u for u in self._users().filter(pk__in=user_ids)}
        return [found[str(uid)] for uid in user_ids if str(uid) in found]
