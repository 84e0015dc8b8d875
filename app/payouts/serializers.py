"""
Serializers for payouts API.

Serializer Hierarchy:
    PayoutInvoiceSerializer: Invoice with snapshots and history
    PayoutAdjustmentSerializer: Adjustment row
    PayoutSettingsSerializer: Platform payout settings
    GeneratePayoutsSerializer / MarkInvoicePaidSerializer /
    RevertPayoutSerializer / PlatformFeeSerializer: Write requests
"""

from rest_framework import serializers

from payouts.models import PayoutAdjustment, PayoutInvoice, PayoutSettings


class PayoutAdjustmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = PayoutAdjustment
        fields = [
            "id",
            "organization",
            "order",
            "original_invoice",
            "type",
            "amount",
            "reason",
            "status",
            "applied_invoice",
            "applied_at",
            "created_at",
        ]
        read_only_fields = fields


class PayoutInvoiceSerializer(serializers.ModelSerializer):
    organization_name = serializers.CharField(source="organization.name", read_only=True)

    class Meta:
        model = PayoutInvoice
        fields = [
            "id",
            "invoice_number",
            "organization",
            "organization_name",
            "period_start",
            "period_end",
            "gross_amount",
            "platform_fee_percentage",
            "platform_fee_amount",
            "total_adjustment_amount",
            "adjustment_count",
            "total_voucher_discount",
            "net_amount",
            "order_count",
            "item_count",
            "order_summary",
            "product_summary",
            "adjustment_summary",
            "organization_info",
            "status",
            "status_history",
            "paid_at",
            "payment_reference",
            "payment_notes",
            "pdf_url",
            "created_at",
        ]
        read_only_fields = fields


class PayoutSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = PayoutSettings
        fields = [
            "default_platform_fee_percentage",
            "cutoff_day_of_week",
            "payout_day_of_week",
            "minimum_payout_amount",
            "send_invoice_emails",
            "send_payment_emails",
            "last_run_at",
            "last_run_status",
            "last_run_invoices_generated",
        ]
        read_only_fields = ["last_run_at", "last_run_status", "last_run_invoices_generated"]


class GeneratePayoutsSerializer(serializers.Serializer):
    period_start = serializers.DateTimeField()
    period_end = serializers.DateTimeField()

    def validate(self, attrs):
        if attrs["period_end"] <= attrs["period_start"]:
            raise serializers.ValidationError({"period_end": "Must be after period_start."})
        return attrs


class MarkInvoicePaidSerializer(serializers.Serializer):
    payment_reference = serializers.CharField(max_length=255, required=False, allow_blank=True)
    payment_notes = serializers.CharField(required=False, allow_blank=True)


class RevertPayoutSerializer(serializers.Serializer):
    reason = serializers.CharField(allow_blank=True)


class PlatformFeeSerializer(serializers.Serializer):
    platform_fee_percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, allow_null=True
    )
