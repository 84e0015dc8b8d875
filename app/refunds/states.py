"""
Enums for refund requests.

RefundRequest status:
    PENDING → APPROVED (order cancelled, CUSTOMER refund voucher issued)
    PENDING → REJECTED (order untouched)
    APPROVED and REJECTED are final
"""

from django.db import models


class RefundRequestStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"


class RefundReason(models.TextChoices):
    WRONG_SIZE = "WRONG_SIZE", "Wrong Size"
    WRONG_ITEM = "WRONG_ITEM", "Wrong Item Received"
    WRONG_PAYMENT = "WRONG_PAYMENT", "Wrong Payment Method"
    DEFECTIVE_ITEM = "DEFECTIVE_ITEM", "Defective/Damaged Item"
    NOT_AS_DESCRIBED = "NOT_AS_DESCRIBED", "Item Not as Described"
    CHANGED_MIND = "CHANGED_MIND", "Changed My Mind"
    DUPLICATE_ORDER = "DUPLICATE_ORDER", "Duplicate Order"
    DELIVERY_ISSUE = "DELIVERY_ISSUE", "Delivery Issue"
    OTHER = "OTHER", "Other"
