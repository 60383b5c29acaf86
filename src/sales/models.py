"""Models for the sales app."""
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from core.models import TimeStampedModel


# ---------------------------------------------------------------------------
# Invoice
# ---------------------------------------------------------------------------

class Invoice(TimeStampedModel):
    """A customer invoice issued by the sales team.

    Only PAID invoices count toward sales target attainment, and they are
    credited to ``created_by`` (the attributed salesperson). An invoice with
    no ``created_by`` is unattributed and only counts company-wide.
    """

    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Brouillon"
        SENT = "SENT", "Envoyee"
        PENDING = "PENDING", "En attente"
        PAID = "PAID", "Payee"
        OVERDUE = "OVERDUE", "En retard"
        CANCELLED = "CANCELLED", "Annulee"

    invoice_number = models.CharField(
        "numero de facture",
        max_length=50,
        unique=True,
    )
    customer_name = models.CharField("client", max_length=200, blank=True, default="")
    invoice_date = models.DateTimeField("date de facture", default=timezone.now, db_index=True)
    due_date = models.DateField("echeance", null=True, blank=True)
    status = models.CharField(
        "statut",
        max_length=20,
        choices=Status.choices,
        default=Status.DRAFT,
        db_index=True,
    )
    total_amount = models.DecimalField(
        "montant total",
        max_digits=16,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    paid_at = models.DateTimeField("payee le", null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoices_created",
        verbose_name="commercial",
    )

    class Meta:
        verbose_name = "facture"
        verbose_name_plural = "factures"
        ordering = ["-invoice_date"]
        indexes = [
            models.Index(fields=["status", "invoice_date"], name="sales_invoi_status_6c1f0e_idx"),
            models.Index(
                fields=["created_by", "status", "invoice_date"],
                name="sales_invoi_created_9b2d4a_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.invoice_number} ({self.get_status_display()})"
