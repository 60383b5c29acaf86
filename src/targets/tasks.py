"""Celery tasks for the targets module."""
from __future__ import annotations

import json
import logging

from celery import shared_task
from django.core.serializers.json import DjangoJSONEncoder

logger = logging.getLogger(__name__)


@shared_task
def build_attainment_report(*, target_type: str, periods=None, user_ids=None, company: bool = False):
    """Assemble an attainment report in the background.

    Returns a JSON-compatible payload so the result backend can store it.
    ``user_ids=None`` reports on every eligible user.
    """
    from targets.engine import build_assembler, build_user_directory

    assembler = build_assembler()
    if company:
        report = assembler.build_company(target_type, periods=periods)
    else:
        directory = build_user_directory()
        if user_ids:
            users = directory.users_by_ids(user_ids)
        else:
            users = directory.eligible_users()
        report = assembler.build(users, target_type, periods=periods)

    logger.info(
        "Rapport d'objectifs genere type=%s company=%s (%d lignes, %d ignorees)",
        target_type,
        company,
        len(report.results),
        len(report.skipped),
    )
    payload = {
        "target_type": report.target_type,
        "periods": report.periods,
        "data": [result.as_dict() for result in report.results],
        "skipped": [skipped.as_dict() for skipped in report.skipped],
    }
    return json.loads(json.dumps(payload, cls=DjangoJSONEncoder))
