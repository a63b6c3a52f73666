from django.apps import AppConfig


class StoreConfig(AppConfig):
    """Configuration for the store settings application."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'store'
    verbose_name = 'Store Settings'
