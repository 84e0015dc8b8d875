from django.apps import AppConfig


class OrganizationsConfig(AppConfig):
    """Configuration for the organizations (sellers/tenants) application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "organizations"
    verbose_name = "Organizations"
