"""
Payments app configuration.

This app records gateway payments:
- Payment rows, one per order and gateway payment
- Webhook delivery log and async processing
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
