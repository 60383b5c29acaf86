import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Invoice",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                ("invoice_number", models.CharField(max_length=50, unique=True, verbose_name="numero de facture")),
                ("customer_name", models.CharField(blank=True, default="", max_length=200, verbose_name="client")),
                (
                    "invoice_date",
                    models.DateTimeField(
                        db_index=True, default=django.utils.timezone.now, verbose_name="date de facture"
                    ),
                ),
                ("due_date", models.DateField(blank=True, null=True, verbose_name="echeance")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("DRAFT", "Brouillon"),
                            ("SENT", "Envoyee"),
                            ("PENDING", "En attente"),
                            ("PAID", "Payee"),
                            ("OVERDUE", "En retard"),
                            ("CANCELLED", "Annulee"),
                        ],
                        db_index=True,
                        default="DRAFT",
                        max_length=20,
                        verbose_name="statut",
                    ),
                ),
                (
                    "total_amount",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=16,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                        verbose_name="montant total",
                    ),
                ),
                ("paid_at", models.DateTimeField(blank=True, null=True, verbose_name="payee le")),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="invoices_created",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="commercial",
                    ),
                ),
            ],
            options={
                "verbose_name": "facture",
                "verbose_name_plural": "factures",
                "ordering": ["-invoice_date"],
                "indexes": [
                    models.Index(fields=["status", "invoice_date"], name="sales_invoi_status_6c1f0e_idx"),
                    models.Index(
                        fields=["created_by", "status", "invoice_date"], name="sales_invoi_created_9b2d4a_idx"
                    ),
                ],
            },
        ),
    ]
