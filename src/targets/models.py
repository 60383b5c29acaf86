"""Models for the sales targets module."""
from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from core.models import TimeStampedModel
from targets import periods
from targets.exceptions import InvalidPeriodKey


class Target(TimeStampedModel):
    """Revenue quota for one salesperson (or the whole company) over a period.

    ``owner`` left empty means a company-wide target. The period key format
    depends on ``target_type`` (see :mod:`targets.periods`).
    """

    class TargetType(models.TextChoices):
        MONTHLY = periods.MONTHLY, "Mensuel"
        QUARTERLY = periods.QUARTERLY, "Trimestriel"
        YEARLY = periods.YEARLY, "Annuel"

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sales_targets",
        null=True,
        blank=True,
        verbose_name="commercial",
        help_text="Laissez vide pour un objectif global de l'entreprise.",
    )
    target_type = models.CharField(
        "type d'objectif",
        max_length=10,
        choices=TargetType.choices,
        default=TargetType.MONTHLY,
    )
    target_period = models.CharField(
        "periode",
        max_length=7,
        help_text="YYYY-MM, YYYY-Qn ou YYYY selon le type.",
    )
    target_amount = models.DecimalField(
        "montant cible",
        max_digits=16,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    is_active = models.BooleanField("actif", default=True)
    notes = models.TextField("notes", blank=True)

    class Meta:
        verbose_name = "objectif commercial"
        verbose_name_plural = "objectifs commerciaux"
        ordering = ["target_period", "created_at"]
        indexes = [
            models.Index(
                fields=["owner", "target_type", "target_period"],
                name="targets_tar_owner_i_3e8a1c_idx",
            ),
            models.Index(
                fields=["target_type", "is_active"],
                name="targets_tar_target__7d2b90_idx",
            ),
        ]

    def __str__(self) -> str:
        who = self.owner.get_full_name() if self.owner_id else "Entreprise"
        return f"{who} - {self.target_period} ({self.get_target_type_display()})"

    @property
    def is_company_wide(self) -> bool:
        return self.owner_id is None

    def clean(self) -> None:
        try:
            periods.parse_period(self.target_period, self.target_type)
        except InvalidPeriodKey as exc:
            raise ValidationError({"target_period": str(exc)})

        if not self.is_active:
            return
        duplicates = Target.objects.filter(
            owner_id=self.owner_id,
            target_type=self.target_type,
            target_period=self.target_period,
            is_active=True,
        )
        if self.pk:
            duplicates = duplicates.exclude(pk=self.pk)
        if duplicates.exists():
            raise ValidationError(
                "Un objectif actif existe deja pour ce commercial, ce type et cette periode."
            )
