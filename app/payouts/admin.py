from django.contrib import admin

from payouts.models import PayoutAdjustment, PayoutInvoice, PayoutSettings


@admin.register(PayoutInvoice)
class PayoutInvoiceAdmin(admin.ModelAdmin):
    """Amounts and snapshots are frozen at generation time."""

    list_display = (
        "invoice_number",
        "organization",
        "period_start",
        "period_end",
        "net_amount",
        "status",
    )
    list_filter = ("status",)
    search_fields = ("invoice_number", "organization__name")
    raw_id_fields = ("organization", "paid_by")
    readonly_fields = (
        "invoice_number",
        "gross_amount",
        "platform_fee_percentage",
        "platform_fee_amount",
        "total_adjustment_amount",
        "net_amount",
        "order_summary",
        "product_summary",
        "adjustment_summary",
        "organization_info",
        "status_history",
    )


@admin.register(PayoutAdjustment)
class PayoutAdjustmentAdmin(admin.ModelAdmin):
    list_display = ("organization", "type", "amount", "status", "created_at")
    list_filter = ("type", "status")
    raw_id_fields = ("organization", "order", "original_invoice", "applied_invoice", "created_by")


@admin.register(PayoutSettings)
class PayoutSettingsAdmin(admin.ModelAdmin):
    list_display = (
        "default_platform_fee_percentage",
        "cutoff_day_of_week",
        "minimum_payout_amount",
        "last_run_at",
        "last_run_status",
    )
