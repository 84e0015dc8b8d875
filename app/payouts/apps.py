from django.apps import AppConfig


class PayoutsConfig(AppConfig):
    """Configuration for the seller payout application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payouts"
    verbose_name = "Payouts"
