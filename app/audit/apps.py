from django.apps import AppConfig


class AuditConfig(AppConfig):
    """Configuration for the audit log application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "audit"
    verbose_name = "Audit Log"
