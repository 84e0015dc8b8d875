"""
Serializers for refunds API.

Serializer Hierarchy:
    RefundRequestSerializer: Read-only representation
    RefundRequestCreateSerializer: Customer request
    RefundReviewSerializer: Approve / reject payload
"""

from rest_framework import serializers

from orders.models import Order
from refunds.models import RefundRequest
from refunds.services import (
    ADMIN_MESSAGE_MAX_LENGTH,
    ADMIN_MESSAGE_MIN_LENGTH,
    CUSTOMER_MESSAGE_MAX_LENGTH,
)
from refunds.states import RefundReason


class RefundRequestSerializer(serializers.ModelSerializer):
    voucher_code = serializers.CharField(source="voucher.code", read_only=True, default=None)

    class Meta:
        model = RefundRequest
        fields = [
            "id",
            "order",
            "organization",
            "requested_by",
            "status",
            "reason",
            "customer_message",
            "refund_amount",
            "order_info",
            "customer_info",
            "organization_info",
            "admin_message",
            "reviewed_by",
            "reviewed_at",
            "voucher",
            "voucher_code",
            "created_at",
        ]
        read_only_fields = fields


class RefundRequestCreateSerializer(serializers.Serializer):
    order = serializers.PrimaryKeyRelatedField(queryset=Order.objects.all())
    reason = serializers.ChoiceField(choices=RefundReason.choices)
    customer_message = serializers.CharField(
        max_length=CUSTOMER_MESSAGE_MAX_LENGTH, required=False, allow_blank=True
    )


class RefundReviewSerializer(serializers.Serializer):
    admin_message = serializers.CharField(
        min_length=ADMIN_MESSAGE_MIN_LENGTH, max_length=ADMIN_MESSAGE_MAX_LENGTH
    )
