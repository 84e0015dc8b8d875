"""
Payment admin configuration.

Payments and webhook deliveries are created by the webhook processor and
are read-only here apart from the retry bookkeeping.
"""

from django.contrib import admin

from payments.models import Payment, WebhookEvent


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = [
        "reference_no",
        "order",
        "amount",
        "processing_fee",
        "payment_status",
        "reconciliation_status",
        "payment_date",
    ]
    list_filter = ["payment_status", "reconciliation_status", "payment_provider"]
    search_fields = ["reference_no", "transaction_id", "order__order_number"]
    raw_id_fields = ["order", "checkout_session", "customer"]
    readonly_fields = [
        "id",
        "transaction_id",
        "amount",
        "processing_fee",
        "net_amount",
        "status_history",
        "order_info",
        "customer_info",
        "metadata",
        "created_at",
        "updated_at",
    ]
    date_hierarchy = "payment_date"


@admin.register(WebhookEvent)
class WebhookEventAdmin(admin.ModelAdmin):
    """
    Admin configuration for WebhookEvent.

    Webhook events are immutable once received.
    """

    list_display = [
        "id",
        "gateway_event_id",
        "event_type",
        "status",
        "retry_count",
        "processed_at",
        "created_at",
    ]
    list_filter = ["status", "event_type", "created_at"]
    search_fields = ["id", "gateway_event_id", "event_type"]
    readonly_fields = [
        "id",
        "created_at",
        "updated_at",
        "gateway_event_id",
        "event_type",
        "payload",
        "processed_at",
        "outcome",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    fieldsets = (
        (None, {"fields": ("id", "gateway_event_id", "event_type", "status")}),
        ("Processing", {"fields": ("processed_at", "outcome", "retry_count")}),
        ("Error Info", {"fields": ("error_message",), "classes": ("collapse",)}),
        ("Payload", {"fields": ("payload",), "classes": ("collapse",)}),
        ("Timestamps", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )
