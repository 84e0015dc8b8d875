"""
WebhookEvent model for gateway webhook tracking.

Stores every delivery received from the payment gateway. The unique
gateway_event_id makes redelivery detectable before any processing runs.

Usage:
    event, created = WebhookEvent.objects.get_or_create(
        gateway_event_id="evt_123",
        defaults={"event_type": "payment.paid", "payload": payload},
    )
    if not created and event.is_processed:
        return HttpResponse("Already processed", status=200)
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.states import WebhookEventStatus


class WebhookEvent(UUIDPrimaryKeyMixin, BaseModel):
    """
    Raw gateway delivery and its processing state.

    Processing Flow:
        1. Webhook arrives, signature verified
        2. get_or_create on gateway_event_id
        3. PROCESSED duplicates are acknowledged without work
        4. Task marks PROCESSING, dispatches, marks PROCESSED or FAILED
        5. retry_failed_webhooks re-queues FAILED events below the retry cap
    """

    gateway_event_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Gateway event id, unique for idempotency",
    )
    event_type = models.CharField(
        max_length=100,
        db_index=True,
    )
    payload = models.JSONField(
        help_text="Full webhook body",
    )

    status = models.CharField(
        max_length=20,
        choices=WebhookEventStatus.choices,
        default=WebhookEventStatus.PENDING,
        db_index=True,
    )
    processed_at = models.DateTimeField(
        null=True,
        blank=True,
    )
    outcome = models.CharField(
        max_length=255,
        blank=True,
        help_text="Reason reported by the processor",
    )
    error_message = models.TextField(
        null=True,
        blank=True,
    )
    retry_count = models.PositiveSmallIntegerField(
        default=0,
        help_text="Number of processing attempts",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Webhook Event"
        verbose_name_plural = "Webhook Events"
        indexes = [
            models.Index(fields=["status", "retry_count"]),
        ]

    def __str__(self) -> str:
        return f"WebhookEvent({self.gateway_event_id}, {self.event_type})"

    @property
    def is_processed(self) -> bool:
        return self.status == WebhookEventStatus.PROCESSED

    @property
    def can_retry(self) -> bool:
        return (
            self.status == WebhookEventStatus.FAILED
            and self.retry_count < settings.PAYMENT_WEBHOOK_MAX_RETRIES
        )

    # Helpers below do not save; the caller saves.

    def mark_processing(self) -> None:
        self.status = WebhookEventStatus.PROCESSING
        self.retry_count += 1

    def mark_processed(self, outcome: str = "") -> None:
        self.status = WebhookEventStatus.PROCESSED
        self.processed_at = timezone.now()
        self.outcome = outcome[:255]
        self.error_message = None

    def mark_failed(self, error_message: str) -> None:
        self.status = WebhookEventStatus.FAILED
        self.error_message = error_message
