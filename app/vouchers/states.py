"""
Enums for voucher models.

DiscountType:
    PERCENTAGE      order_amount * value / 100, capped by max_discount_amount
    FIXED_AMOUNT    min(value, order_amount)
    REFUND          full value, assigned to one customer
    FREE_ITEM       priced by the caller from catalog data
    FREE_SHIPPING   priced by the caller

VoucherErrorCode is the closed taxonomy returned by validation.

VoucherRefundRequest status:
    PENDING → APPROVED (voucher deactivated for a bank transfer)
    PENDING → REJECTED (voucher stays usable and may be requested again)
"""

from django.db import models


class DiscountType(models.TextChoices):
    PERCENTAGE = "PERCENTAGE", "Percentage"
    FIXED_AMOUNT = "FIXED_AMOUNT", "Fixed Amount"
    FREE_ITEM = "FREE_ITEM", "Free Item"
    FREE_SHIPPING = "FREE_SHIPPING", "Free Shipping"
    REFUND = "REFUND", "Refund"


class CancellationInitiator(models.TextChoices):
    CUSTOMER = "CUSTOMER", "Customer"
    SELLER = "SELLER", "Seller"


class VoucherErrorCode(models.TextChoices):
    NOT_FOUND = "NOT_FOUND", "Voucher not found"
    INACTIVE = "INACTIVE", "Voucher inactive"
    NOT_STARTED = "NOT_STARTED", "Voucher not started"
    EXPIRED = "EXPIRED", "Voucher expired"
    ORGANIZATION_MISMATCH = "ORGANIZATION_MISMATCH", "Wrong organization"
    USAGE_LIMIT_REACHED = "USAGE_LIMIT_REACHED", "Usage limit reached"
    USER_USAGE_LIMIT_REACHED = "USER_USAGE_LIMIT_REACHED", "User usage limit reached"
    MIN_ORDER_NOT_MET = "MIN_ORDER_NOT_MET", "Minimum order not met"


class VoucherRefundRequestStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"
