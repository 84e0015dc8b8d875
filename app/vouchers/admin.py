from django.contrib import admin

from vouchers.models import Voucher, VoucherRefundRequest, VoucherUsage


class VoucherUsageInline(admin.TabularInline):
    model = VoucherUsage
    extra = 0
    can_delete = False
    raw_id_fields = ("order", "user")
    readonly_fields = ("discount_amount", "voucher_snapshot", "single_use", "created_at")


@admin.register(Voucher)
class VoucherAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "organization", "discount_type", "discount_value", "used_count", "is_active")
    list_filter = ("discount_type", "is_active", "cancellation_initiator", "is_deleted")
    search_fields = ("code", "name")
    raw_id_fields = ("organization", "assigned_to", "source_order", "source_refund_request", "created_by", "free_item_product")
    readonly_fields = ("used_count", "monetary_refund_requested_at")
    inlines = [VoucherUsageInline]


@admin.register(VoucherUsage)
class VoucherUsageAdmin(admin.ModelAdmin):
    list_display = ("voucher", "order", "user", "discount_amount", "created_at")
    search_fields = ("voucher__code", "order__order_number")
    raw_id_fields = ("voucher", "order", "user")


@admin.register(VoucherRefundRequest)
class VoucherRefundRequestAdmin(admin.ModelAdmin):
    """Read-mostly admin; reviews belong to VoucherRefundRequestManager."""

    list_display = ("voucher", "requested_by", "status", "amount", "created_at")
    list_filter = ("status", "is_deleted")
    search_fields = ("voucher__code", "requested_by__email")
    raw_id_fields = ("voucher", "requested_by", "reviewed_by")
    readonly_fields = ("status", "amount", "voucher_info", "customer_info", "source_order_info", "reviewed_at")
