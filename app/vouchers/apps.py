from django.apps import AppConfig


class VouchersConfig(AppConfig):
    """Configuration for the voucher engine application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "vouchers"
    verbose_name = "Vouchers"
