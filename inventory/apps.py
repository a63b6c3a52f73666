from django.apps import AppConfig


class InventoryConfig(AppConfig):
    """
    Configuration for the Inventory application.

    This app manages the garment catalogue:
    - Categories, Sizes and Colors (lookup tables)
    - Products (price, cost, stock level, size/color lists)
    - Size-specific prices
    - Stock Entries (sales, cancellations, adjustments)
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'inventory'
    verbose_name = 'Inventory Management'

    def ready(self):
        """
        Import signal handlers when the app is ready.

        Signals handle:
        - Product creation/update logging
        - Low stock alerts against the store threshold
        - Audit trail logging for stock movements
        """
        import inventory.signals  # noqa: F401
