"""DRF serializers for the targets module."""
from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import serializers

from targets import periods
from targets.exceptions import InvalidPeriodKey
from targets.models import Target


# ────────────────────────────────────────────────────────────
# Targets
# ────────────────────────────────────────────────────────────

class TargetSerializer(serializers.ModelSerializer):
    owner_name = serializers.SerializerMethodField()
    is_company_wide = serializers.BooleanField(read_only=True)

    class Meta:
        model = Target
        fields = [
            "id", "owner", "owner_name", "is_company_wide", "target_type",
            "target_period", "target_amount", "is_active", "notes",
            "created_at", "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def get_owner_name(self, obj) -> str:
        if obj.owner_id is None:
            return "Entreprise"
        return obj.owner.get_full_name() or obj.owner.email

    def _value(self, attrs, name):
        if name in attrs:
            return attrs[name]
        if self.instance is not None:
            return getattr(self.instance, name)
        return None

    def validate(self, attrs):
        target_type = self._value(attrs, "target_type") or Target.TargetType.MONTHLY
        target_period = self._value(attrs, "target_period")
        try:
            periods.parse_period(target_period, target_type)
        except InvalidPeriodKey as exc:
            raise serializers.ValidationError({"target_period": str(exc)})

        owner = self._value(attrs, "owner")
        is_active = self._value(attrs, "is_active")
        if is_active is None:
            is_active = True
        if is_active:
            duplicates = Target.objects.filter(
                owner=owner,
                target_type=target_type,
                target_period=target_period,
                is_active=True,
            )
            if self.instance is not None:
                duplicates = duplicates.exclude(pk=self.instance.pk)
            if duplicates.exists():
                raise serializers.ValidationError(
                    "Un objectif actif existe deja pour ce commercial, ce type et cette periode."
                )
        return attrs


# ────────────────────────────────────────────────────────────
# Attainment
# ────────────────────────────────────────────────────────────

class AttainmentResultSerializer(serializers.Serializer):
    target_id = serializers.CharField()
    owner_id = serializers.CharField(allow_null=True)
    owner_name = serializers.CharField()
    target_type = serializers.CharField()
    period = serializers.CharField()
    period_start = serializers.DateTimeField()
    period_end = serializers.DateTimeField()
    target_amount = serializers.DecimalField(max_digits=None, decimal_places=2, coerce_to_string=False)
    # sum of many invoices, so not bounded by the invoice column precision
    achieved_amount = serializers.DecimalField(max_digits=None, decimal_places=2, coerce_to_string=False)
    invoice_count = serializers.IntegerField()
    percentage = serializers.FloatField()


class SkippedTargetSerializer(serializers.Serializer):
    target_id = serializers.CharField()
    owner_id = serializers.CharField(allow_null=True)
    period = serializers.CharField()
    error = serializers.CharField()


class AttainmentQuerySerializer(serializers.Serializer):
    """Validates the query string of the attainment endpoints."""

    userId = serializers.UUIDField(required=False)
    targetType = serializers.ChoiceField(
        choices=Target.TargetType.choices,
        required=False,
        default=Target.TargetType.MONTHLY,
    )
    periods = serializers.IntegerField(required=False, min_value=1)

    def validate_periods(self, value):
        from django.conf import settings

        if value > settings.TARGET_REPORT_MAX_PERIODS:
            raise serializers.ValidationError(
                f"Au plus {settings.TARGET_REPORT_MAX_PERIODS} periodes."
            )
        return value


class AsyncAttainmentRequestSerializer(serializers.Serializer):
    targetType = serializers.ChoiceField(
        choices=Target.TargetType.choices,
        required=False,
        default=Target.TargetType.MONTHLY,
    )
    periods = serializers.IntegerField(required=False, min_value=1, allow_null=True)
    userIds = serializers.ListField(child=serializers.UUIDField(), required=False)
    company = serializers.BooleanField(required=False, default=False)

    def validate_periods(self, value):
        from django.conf import settings

        if value is not None and value > settings.TARGET_REPORT_MAX_PERIODS:
            raise serializers.ValidationError(
                f"Au plus {settings.TARGET_REPORT_MAX_PERIODS} periodes."
            )
        return value


class EligibleUserSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(source="get_full_name", read_only=True)

    class Meta:
        model = get_user_model()
        fields = ["id", "email", "first_name", "last_name", "full_name", "role"]
