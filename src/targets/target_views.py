"""API views for the targets module."""
from __future__ import annotations

import logging

from django.conf import settings
from django.utils import timezone
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.permissions import IsSalesOrTargetManager, IsTargetManager
from core.export import rows_to_csv_response, rows_to_xlsx_response
from targets.engine import build_assembler, build_user_directory
from targets.exceptions import DataAccessError
from targets.models import Target
from targets.periods import current_period_key
from targets.target_serializers import (
    AsyncAttainmentRequestSerializer,
    AttainmentQuerySerializer,
    AttainmentResultSerializer,
    EligibleUserSerializer,
    SkippedTargetSerializer,
    TargetSerializer,
)

logger = logging.getLogger(__name__)


# ────────────────────────────────────────────────────────────
# Helpers
# ────────────────────────────────────────────────────────────

def _error(message, status_code):
    return Response({"success": False, "error": message}, status=status_code)


def _first_error(errors) -> str:
    """Flatten DRF serializer errors into one readable message."""
    for field_name, messages in errors.items():
        message = messages[0] if isinstance(messages, list) else messages
        if field_name == "non_field_errors":
            return str(message)
        return f"{field_name}: {message}"
    return "Parametres invalides."


class _AttainmentQueryMixin:
    """Shared query parsing and user scoping for the attainment endpoints."""

    def parse_query(self, request):
        query = AttainmentQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return None, _error(_first_error(query.errors), status.HTTP_400_BAD_REQUEST)
        return query.validated_data, None

    def resolve_users(self, request, user_id):
        """Return ``(users, error_response)`` for the requested scope.

        Salespeople only ever see themselves; managers may target one user
        or, without ``userId``, every eligible user.
        """
        user = request.user
        if not user.can_manage_targets:
            if user_id is not None and str(user_id) != str(user.pk):
                return None, _error(
                    "Vous ne pouvez consulter que vos propres objectifs.",
                    status.HTTP_403_FORBIDDEN,
                )
            return [user], None

        directory = build_user_directory()
        if user_id is None:
            return directory.eligible_users(), None
        target_user = directory.get_user(user_id)
        if target_user is None:
            return None, _error("Utilisateur introuvable.", status.HTTP_404_NOT_FOUND)
        return [target_user], None

    def build_report(self, request, query, company=False):
        """Return ``(report, error_response)``."""
        assembler = build_assembler()
        target_type = query["targetType"]
        periods = query.get("periods")
        if company:
            return assembler.build_company(target_type, periods=periods), None

        users, error = self.resolve_users(request, query.get("userId"))
        if error is not None:
            return None, error
        return assembler.build(users, target_type, periods=periods), None


# ────────────────────────────────────────────────────────────
# Attainment reports
# ────────────────────────────────────────────────────────────

class AttainmentReportView(_AttainmentQueryMixin, APIView):
    """
    GET /api/v1/targets/attainment/?userId=&targetType=MONTHLY&periods=6
    Attainment per user target; ``periods`` limits to the N most recent keys.
    """
    permission_classes = [permissions.IsAuthenticated, IsSalesOrTargetManager]

    def get(self, request):
        query, error = self.parse_query(request)
        if error is not None:
            return error
        try:
            report, error = self.build_report(request, query)
        except DataAccessError:
            logger.exception("Echec du calcul des objectifs atteints")
            return _error("Impossible de calculer les objectifs.", status.HTTP_500_INTERNAL_SERVER_ERROR)
        if error is not None:
            return error

        return Response(
            {
                "success": True,
                "data": AttainmentResultSerializer(report.results, many=True).data,
                "skipped": SkippedTargetSerializer(report.skipped, many=True).data,
            }
        )


class CompanyAttainmentView(_AttainmentQueryMixin, APIView):
    """GET /api/v1/company-targets/attainment/?targetType=&periods="""
    permission_classes = [permissions.IsAuthenticated, IsTargetManager]

    def get(self, request):
        query, error = self.parse_query(request)
        if error is not None:
            return error
        try:
            report, _ = self.build_report(request, query, company=True)
        except DataAccessError:
            logger.exception("Echec du calcul des objectifs de l'entreprise")
            return _error("Impossible de calculer les objectifs.", status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response(
            {
                "success": True,
                "data": AttainmentResultSerializer(report.results, many=True).data,
                "skipped": SkippedTargetSerializer(report.skipped, many=True).data,
            }
        )


EXPORT_COLUMNS = [
    ("owner_name", "Commercial"),
    ("target_type", "Type"),
    ("period", "Periode"),
    ("target_amount", "Objectif"),
    ("achieved_amount", "Realise"),
    ("invoice_count", "Factures payees"),
    (lambda r: round(r.percentage, 2), "Atteinte (%)"),
]


class AttainmentExportView(_AttainmentQueryMixin, APIView):
    """
    GET /api/v1/targets/attainment/export/?file_format=csv|xlsx&company=0|1
    Same filters as the attainment report, rendered as a download.
    """
    permission_classes = [permissions.IsAuthenticated, IsSalesOrTargetManager]

    def get(self, request):
        file_format = request.query_params.get("file_format", "csv").lower()
        if file_format not in ("csv", "xlsx"):
            return _error("Format d'export invalide (csv ou xlsx).", status.HTTP_400_BAD_REQUEST)

        company = request.query_params.get("company", "").lower() in ("1", "true", "yes")
        if company and not request.user.can_manage_targets:
            return _error("Acces reserve aux responsables.", status.HTTP_403_FORBIDDEN)

        query, error = self.parse_query(request)
        if error is not None:
            return error
        try:
            report, error = self.build_report(request, query, company=company)
        except DataAccessError:
            logger.exception("Echec de l'export des objectifs")
            return _error("Impossible de calculer les objectifs.", status.HTTP_500_INTERNAL_SERVER_ERROR)
        if error is not None:
            return error

        stamp = timezone.localdate().strftime("%Y%m%d")
        filename = f"objectifs_{query['targetType'].lower()}_{stamp}"
        if file_format == "xlsx":
            return rows_to_xlsx_response(report.results, EXPORT_COLUMNS, filename, sheet_title="Objectifs")
        return rows_to_csv_response(report.results, EXPORT_COLUMNS, filename)


class AsyncAttainmentReportView(APIView):
    """
    POST /api/v1/targets/attainment/async/
    Body: {"targetType": "MONTHLY", "periods": 12, "userIds": [...], "company": false}
    Queues the report build and returns the Celery task id.
    """
    permission_classes = [permissions.IsAuthenticated, IsTargetManager]

    def post(self, request):
        payload = AsyncAttainmentRequestSerializer(data=request.data)
        if not payload.is_valid():
            return _error(_first_error(payload.errors), status.HTTP_400_BAD_REQUEST)
        data = payload.validated_data

        from targets.tasks import build_attainment_report

        result = build_attainment_report.delay(
            target_type=data["targetType"],
            periods=data.get("periods"),
            user_ids=[str(uid) for uid in data.get("userIds", [])] or None,
            company=data["company"],
        )
        return Response(
            {"success": True, "task_id": result.id},
            status=status.HTTP_202_ACCEPTED,
        )


# ────────────────────────────────────────────────────────────
# Target CRUD
# ────────────────────────────────────────────────────────────

class TargetViewSet(viewsets.ModelViewSet):
    """CRUD for sales targets, reserved to target managers."""
    permission_classes = [permissions.IsAuthenticated, IsTargetManager]
    serializer_class = TargetSerializer
    filterset_fields = ["owner", "target_type", "target_period", "is_active"]
    ordering_fields = ["target_period", "target_amount", "created_at"]

    def get_queryset(self):
        qs = Target.objects.select_related("owner")
        company = self.request.query_params.get("company")
        if company is not None:
            qs = qs.filter(owner__isnull=company.lower() in ("1", "true", "yes"))
        return qs

    def get_permissions(self):
        if self.action == "current_period":
            return [permissions.IsAuthenticated()]
        return super().get_permissions()

    def perform_create(self, serializer):
        target = serializer.save()
        logger.info(
            "Objectif cree id=%s owner=%s %s %s",
            target.pk,
            target.owner_id,
            target.target_type,
            target.target_period,
        )

    @action(detail=True, methods=["post"])
    def toggle(self, request, pk=None):
        target = self.get_object()
        if not target.is_active:
            clash = Target.objects.filter(
                owner_id=target.owner_id,
                target_type=target.target_type,
                target_period=target.target_period,
                is_active=True,
            ).exclude(pk=target.pk)
            if clash.exists():
                return _error(
                    "Un objectif actif existe deja pour ce commercial, ce type et cette periode.",
                    status.HTTP_400_BAD_REQUEST,
                )
        target.is_active = not target.is_active
        target.save(update_fields=["is_active", "updated_at"])
        return Response(self.get_serializer(target).data)

    @action(detail=False, methods=["get"], url_path="eligible-users")
    def eligible_users(self, request):
        users = build_user_directory().eligible_users()
        return Response(EligibleUserSerializer(users, many=True).data)

    @action(detail=False, methods=["get"], url_path="current-period")
    def current_period(self, request):
        target_type = request.query_params.get("targetType", Target.TargetType.MONTHLY)
        if target_type not in Target.TargetType.values:
            return _error("Type d'objectif invalide.", status.HTTP_400_BAD_REQUEST)
        return Response(
            {
                "target_type": target_type,
                "target_period": current_period_key(target_type),
                "currency": settings.CURRENCY,
            }
        )
