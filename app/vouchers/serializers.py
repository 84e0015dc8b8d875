"""
Serializers for vouchers API.

Serializer Hierarchy:
    VoucherSerializer: Read-only representation
    VoucherCreateSerializer: Promotional voucher creation
    VoucherValidateSerializer: Validation request
    VoucherRefundRequestSerializer: Read-only cash refund request
    VoucherRefundRequestCreateSerializer: Customer request
    VoucherRefundReviewSerializer: Approve / reject payload
"""

from rest_framework import serializers

from catalog.models import Product
from organizations.models import Organization
from vouchers.models import Voucher, VoucherRefundRequest
from vouchers.services import (
    CUSTOMER_MESSAGE_MAX_LENGTH,
    REVIEW_MESSAGE_MAX_LENGTH,
    REVIEW_MESSAGE_MIN_LENGTH,
)
from vouchers.states import DiscountType


class VoucherSerializer(serializers.ModelSerializer):
    is_monetarily_eligible = serializers.BooleanField(read_only=True)

    class Meta:
        model = Voucher
        fields = [
            "id",
            "code",
            "name",
            "description",
            "organization",
            "discount_type",
            "discount_value",
            "min_order_amount",
            "max_discount_amount",
            "free_item_product",
            "usage_limit",
            "usage_limit_per_user",
            "used_count",
            "valid_from",
            "valid_until",
            "is_active",
            "assigned_to",
            "cancellation_initiator",
            "monetary_refund_eligible_at",
            "monetary_refund_requested_at",
            "is_monetarily_eligible",
            "source_order",
            "created_at",
        ]
        read_only_fields = fields


class VoucherCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    organization = serializers.PrimaryKeyRelatedField(
        queryset=Organization.objects.all(), required=False, allow_null=True, default=None
    )
    discount_type = serializers.ChoiceField(
        choices=[c for c in DiscountType.choices if c[0] != DiscountType.REFUND]
    )
    discount_value = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    code = serializers.CharField(max_length=30, required=False, allow_blank=True)
    code_prefix = serializers.CharField(max_length=10, required=False, allow_blank=True)
    min_order_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True, min_value=0
    )
    max_discount_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True, min_value=0
    )
    free_item_product = serializers.PrimaryKeyRelatedField(
        queryset=Product.objects.all(), required=False, allow_null=True
    )
    usage_limit = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    usage_limit_per_user = serializers.IntegerField(
        required=False, allow_null=True, min_value=1, default=1
    )
    valid_from = serializers.DateTimeField(required=False, allow_null=True)
    valid_until = serializers.DateTimeField(required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False, default=True)


class VoucherValidateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=30)
    order_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    organization = serializers.PrimaryKeyRelatedField(
        queryset=Organization.objects.all(), required=False, allow_null=True, default=None
    )


class VoucherRefundRequestSerializer(serializers.ModelSerializer):
    voucher_code = serializers.CharField(source="voucher.code", read_only=True)

    class Meta:
        model = VoucherRefundRequest
        fields = [
            "id",
            "voucher",
            "voucher_code",
            "requested_by",
            "status",
            "amount",
            "customer_message",
            "bank_details",
            "voucher_info",
            "customer_info",
            "source_order_info",
            "admin_message",
            "reviewed_by",
            "reviewed_at",
            "created_at",
        ]
        read_only_fields = fields


class BankDetailsSerializer(serializers.Serializer):
    account_name = serializers.CharField(max_length=200)
    account_number = serializers.CharField(max_length=50)
    bank_name = serializers.CharField(max_length=100)


class VoucherRefundRequestCreateSerializer(serializers.Serializer):
    voucher = serializers.PrimaryKeyRelatedField(queryset=Voucher.objects.all())
    customer_message = serializers.CharField(
        max_length=CUSTOMER_MESSAGE_MAX_LENGTH, required=False, allow_blank=True
    )
    bank_details = BankDetailsSerializer(required=False)


class VoucherRefundReviewSerializer(serializers.Serializer):
    admin_message = serializers.CharField(
        min_length=REVIEW_MESSAGE_MIN_LENGTH, max_length=REVIEW_MESSAGE_MAX_LENGTH
    )
