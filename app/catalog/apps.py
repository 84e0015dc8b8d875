from django.apps import AppConfig


class CatalogConfig(AppConfig):
    """Configuration for the product catalog application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "catalog"
    verbose_name = "Catalog"
