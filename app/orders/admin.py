from django.contrib import admin

from orders.models import CheckoutSession, Order, OrderItem, OrderStatusEvent


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    raw_id_fields = ("product", "variant")
    readonly_fields = ("product_title", "variant_label", "quantity", "price")


class OrderStatusEventInline(admin.TabularInline):
    model = OrderStatusEvent
    extra = 0
    can_delete = False
    readonly_fields = ("status", "payment_status", "actor_name", "reason", "note", "created_at")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Read-mostly admin; status changes belong to OrderStateMachine."""

    list_display = (
        "order_number",
        "organization",
        "customer",
        "status",
        "payment_status",
        "total_amount",
        "order_date",
    )
    list_filter = ("status", "payment_status", "is_deleted")
    search_fields = ("order_number", "customer__email")
    raw_id_fields = ("organization", "customer", "payout_invoice")
    readonly_fields = ("order_number", "status", "payment_status", "paid_at", "version")
    inlines = [OrderItemInline, OrderStatusEventInline]


@admin.register(CheckoutSession)
class CheckoutSessionAdmin(admin.ModelAdmin):
    list_display = ("checkout_id", "customer", "status", "total_amount", "created_at")
    list_filter = ("status",)
    search_fields = ("checkout_id", "gateway_checkout_id")
    raw_id_fields = ("customer", "orders")
