from django.contrib import admin

from refunds.models import RefundRequest


@admin.register(RefundRequest)
class RefundRequestAdmin(admin.ModelAdmin):
    """Read-mostly admin; reviews belong to RefundRequestManager."""

    list_display = ("order", "organization", "requested_by", "reason", "status", "refund_amount", "created_at")
    list_filter = ("status", "reason", "is_deleted")
    search_fields = ("order__order_number", "requested_by__email")
    raw_id_fields = ("order", "organization", "requested_by", "reviewed_by", "voucher")
    readonly_fields = ("status", "refund_amount", "order_info", "customer_info", "organization_info", "reviewed_at")
