"""
Serializers for orders API.

Serializer Hierarchy:
    OrderSerializer: Order with items and recent status history
    OrderStatusEventSerializer: One history entry
    CheckoutSerializer: Checkout request
    OrderUpdateSerializer: Status / payment-status change request
    OrderCancelSerializer: Cancellation request

Design Decisions:
    - Read and write serializers are separate
    - Write serializers only validate shape; transitions are checked by
      OrderStateMachine
"""

from rest_framework import serializers

from orders.models import CheckoutSession, Order, OrderItem, OrderStatusEvent
from orders.states import CancellationReason, OrderStatus, PaymentStatus
from vouchers.states import CancellationInitiator


class OrderItemSerializer(serializers.ModelSerializer):
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product",
            "variant",
            "product_title",
            "variant_label",
            "quantity",
            "price",
            "line_total",
        ]
        read_only_fields = fields


class OrderStatusEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusEvent
        fields = ["status", "payment_status", "actor_name", "reason", "note", "created_at"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    recent_status_history = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "organization",
            "customer",
            "status",
            "payment_status",
            "cancellation_reason",
            "total_amount",
            "discount_amount",
            "voucher_discount",
            "voucher_code",
            "item_count",
            "customer_info",
            "notes",
            "order_date",
            "paid_at",
            "checkout_url",
            "checkout_expires_at",
            "version",
            "items",
            "recent_status_history",
        ]
        read_only_fields = fields

    def get_recent_status_history(self, obj: Order) -> list[dict]:
        return OrderStatusEventSerializer(obj.recent_status_history(), many=True).data


class CheckoutSessionSerializer(serializers.ModelSerializer):
    class Meta:
        model = CheckoutSession
        fields = ["id", "checkout_id", "status", "total_amount", "expires_at"]
        read_only_fields = fields


class CheckoutSerializer(serializers.Serializer):
    item_ids = serializers.ListField(
        child=serializers.UUIDField(),
        required=False,
        allow_empty=False,
        help_text="Cart item ids to check out; all items when omitted",
    )
    voucher_code = serializers.CharField(max_length=30, required=False, allow_blank=True)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, default="")


class OrderUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)
    payment_status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)
    cancellation_reason = serializers.ChoiceField(
        choices=CancellationReason.choices, required=False
    )
    note = serializers.CharField(max_length=1000, required=False, allow_blank=True)
    expected_version = serializers.IntegerField(required=False, min_value=1)

    def validate(self, attrs):
        if "status" not in attrs and "payment_status" not in attrs:
            raise serializers.ValidationError("Provide status or payment_status.")
        return attrs


class OrderCancelSerializer(serializers.Serializer):
    reason = serializers.ChoiceField(choices=CancellationReason.choices)
    note = serializers.CharField(max_length=1000, required=False, allow_blank=True)
    initiator = serializers.ChoiceField(
        choices=CancellationInitiator.choices, default=CancellationInitiator.SELLER
    )
