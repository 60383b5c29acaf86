"""Django admin for the targets module."""
from django.conf import settings
from django.contrib import admin

from targets.engine import build_assembler
from targets.exceptions import InvalidPeriodKey
from targets.models import Target


@admin.register(Target)
class TargetAdmin(admin.ModelAdmin):
    list_display = (
        "owner_display", "target_type", "target_period",
        "target_amount_display", "attainment_display", "is_active",
    )
    list_filter = ("target_type", "is_active")
    search_fields = ("owner__email", "owner__first_name", "owner__last_name", "target_period")
    readonly_fields = ("created_at", "updated_at")
    ordering = ("-target_period",)
    list_select_related = ("owner",)
    actions = ["activate", "deactivate"]

    def owner_display(self, obj):
        return obj.owner or "Entreprise"
    owner_display.short_description = "Commercial"

    def target_amount_display(self, obj):
        return f"{obj.target_amount:,.0f} {settings.CURRENCY}"
    target_amount_display.short_description = "Objectif"

    def attainment_display(self, obj):
        try:
            result = build_assembler().for_target(obj)
        except InvalidPeriodKey:
            return "-"
        return f"{result.percentage:.1f} %"
    attainment_display.short_description = "Atteinte"

    @admin.action(description="Activer les objectifs selectionnes")
    def activate(self, request, queryset):
        updated = queryset.update(is_active=True)
        self.message_user(request, f"{updated} objectif(s) active(s).")

    @admin.action(description="Desactiver les objectifs selectionnes")
    def deactivate(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f"{updated} objectif(s) desactive(s).")
