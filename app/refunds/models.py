"""
Refund request models.

- RefundRequest: A customer's request to cancel a paid order for a refund
  voucher

State Machine (django-fsm):
    PENDING → APPROVED / REJECTED; both are final. RefundRequestManager
    in refunds.services performs the side effects.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models
from django_fsm import FSMField, transition

from core.managers import SoftDeleteManager
from core.model_mixins import SoftDeleteMixin, UUIDPrimaryKeyMixin
from core.models import BaseModel
from refunds.states import RefundReason, RefundRequestStatus


class RefundRequest(UUIDPrimaryKeyMixin, SoftDeleteMixin, BaseModel):
    """
    Customer refund request for one paid order.

    Snapshots of the order, customer and organization are frozen at request
    time so reviewers see what the customer saw. At most one PENDING
    request may exist per order.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="refund_requests",
        help_text="Order to refund",
    )
    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="refund_requests",
        help_text="Selling organization of the order",
    )
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="refund_requests",
        help_text="Customer who asked for the refund",
    )

    # ==========================================================================
    # Request
    # ==========================================================================

    reason = models.CharField(
        max_length=20,
        choices=RefundReason.choices,
        help_text="Reason category",
    )
    customer_message = models.TextField(
        blank=True,
        help_text="Free-form explanation from the customer",
    )
    refund_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Order total at request time",
    )
    order_info = models.JSONField(
        default=dict,
        blank=True,
        help_text="Order snapshot at request time",
    )
    customer_info = models.JSONField(
        default=dict,
        blank=True,
        help_text="Customer snapshot at request time",
    )
    organization_info = models.JSONField(
        default=dict,
        blank=True,
        help_text="Organization snapshot at request time",
    )

    # ==========================================================================
    # Review
    # ==========================================================================

    status = FSMField(
        default=RefundRequestStatus.PENDING,
        choices=RefundRequestStatus.choices,
        db_index=True,
        help_text="Review status",
    )
    admin_message = models.TextField(
        blank=True,
        help_text="Reviewer's message to the customer",
    )
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_refund_requests",
        help_text="User who approved or rejected the request",
    )
    reviewed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the request was reviewed",
    )
    voucher = models.ForeignKey(
        "vouchers.Voucher",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="Refund voucher issued on approval",
    )

    objects = SoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "refund request"
        verbose_name_plural = "refund requests"
        indexes = [
            models.Index(fields=["organization", "status"]),
            models.Index(fields=["requested_by", "-created_at"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["order"],
                condition=models.Q(status=RefundRequestStatus.PENDING, is_deleted=False),
                name="unique_pending_refund_request_per_order",
            ),
        ]

    def __str__(self):
        return f"Refund {self.order_info.get('order_number', self.order_id)} ({self.status})"

    @transition(field=status, source=RefundRequestStatus.PENDING, target=RefundRequestStatus.APPROVED)
    def approve(self):
        """PENDING -> APPROVED. Final."""

    @transition(field=status, source=RefundRequestStatus.PENDING, target=RefundRequestStatus.REJECTED)
    def reject(self):
        """PENDING -> REJECTED. Final."""

    @property
    def is_pending(self) -> bool:
        return self.status == RefundRequestStatus.PENDING
