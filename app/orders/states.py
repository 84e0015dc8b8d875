"""
State enums for order models.

This module defines all state enums used by order models with django-fsm.

State Machines Overview:

Order status:
    PENDING → PROCESSING → READY → DELIVERED
    PENDING/PROCESSING/READY → CANCELLED
    DELIVERED and CANCELLED are final (system admins may override)

Order payment status:
    PENDING/DOWNPAYMENT → PAID → REFUNDED
    REFUNDED is one-way

CheckoutSession:
    PENDING → PAID
    PENDING → EXPIRED / CANCELLED
"""

from django.db import models


class OrderStatus(models.TextChoices):
    """
    Fulfilment status of an order.

    Terminal states: DELIVERED, CANCELLED
    """

    PENDING = "PENDING", "Pending"
    PROCESSING = "PROCESSING", "Processing"
    READY = "READY", "Ready for pickup"
    DELIVERED = "DELIVERED", "Delivered"
    CANCELLED = "CANCELLED", "Cancelled"


FINAL_ORDER_STATUSES = (OrderStatus.DELIVERED, OrderStatus.CANCELLED)
OPEN_ORDER_STATUSES = (OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.READY)


class PaymentStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    DOWNPAYMENT = "DOWNPAYMENT", "Downpayment"
    PAID = "PAID", "Paid"
    REFUNDED = "REFUNDED", "Refunded"


class CancellationReason(models.TextChoices):
    OUT_OF_STOCK = "OUT_OF_STOCK", "Out of stock"
    CUSTOMER_REQUEST = "CUSTOMER_REQUEST", "Customer request"
    PAYMENT_FAILED = "PAYMENT_FAILED", "Payment failed"
    OTHERS = "OTHERS", "Others"


class CheckoutSessionStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PAID = "PAID", "Paid"
    EXPIRED = "EXPIRED", "Expired"
    CANCELLED = "CANCELLED", "Cancelled"
