"""Admin configuration for the sales app."""
from django.contrib import admin

from sales.models import Invoice


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = (
        "invoice_number",
        "customer_name",
        "invoice_date",
        "status",
        "total_amount",
        "created_by",
    )
    list_filter = ("status", "invoice_date")
    search_fields = (
        "invoice_number",
        "customer_name",
        "created_by__email",
        "created_by__first_name",
    )
    readonly_fields = ("id", "paid_at", "created_at", "updated_at")
    date_hierarchy = "invoice_date"
    ordering = ("-invoice_date",)
