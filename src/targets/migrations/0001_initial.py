import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Target",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                (
                    "target_type",
                    models.CharField(
                        choices=[("MONTHLY", "Mensuel"), ("QUARTERLY", "Trimestriel"), ("YEARLY", "Annuel")],
                        default="MONTHLY",
                        max_length=10,
                        verbose_name="type d'objectif",
                    ),
                ),
                (
                    "target_period",
                    models.CharField(
                        help_text="YYYY-MM, YYYY-Qn ou YYYY selon le type.",
                        max_length=7,
                        verbose_name="periode",
                    ),
                ),
                (
                    "target_amount",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=16,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                        verbose_name="montant cible",
                    ),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="actif")),
                ("notes", models.TextField(blank=True, verbose_name="notes")),
                (
                    "owner",
                    models.ForeignKey(
                        blank=True,
                        help_text="Laissez vide pour un objectif global de l'entreprise.",
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sales_targets",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="commercial",
                    ),
                ),
            ],
            options={
                "verbose_name": "objectif commercial",
                "verbose_name_plural": "objectifs commerciaux",
                "ordering": ["target_period", "created_at"],
                "indexes": [
                    models.Index(
                        fields=["owner", "target_type", "target_period"], name="targets_tar_owner_i_3e8a1c_idx"
                    ),
                    models.Index(fields=["target_type", "is_active"], name="targets_tar_target__7d2b90_idx"),
                ],
            },
        ),
    ]
