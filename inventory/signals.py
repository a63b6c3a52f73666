from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from store.models import StoreSettings
from .models import Product, StockEntry

logger = logging.getLogger(__name__)


# ============================================
# PRODUCT SIGNALS
# ============================================

@receiver(post_save, sender=Product)
def product_post_save(sender, instance, created, **kwargs):
    """Log product creation/updates."""
    if created:
        logger.info(
            f"Product created: #{instance.pk} - {instance.name} "
            f"(Category: {instance.category.name if instance.category else 'None'}, "
            f"Stock: {instance.quantity_in_stock})"
        )
    else:
        logger.debug(
            f"Product updated: #{instance.pk} - {instance.name} "
            f"(Stock: {instance.quantity_in_stock})"
        )


@receiver(post_delete, sender=Product)
def product_post_delete(sender, instance, **kwargs):
    """Invoice items keep their snapshot; only the reference is cleared."""
    logger.info(f"Product deleted: #{instance.pk} - {instance.name}")


# ============================================
# LOW STOCK ALERTS
# ============================================

@receiver(post_save, sender=Product)
def check_low_stock_alert(sender, instance, update_fields=None, **kwargs):
    """Warn when a product reaches the store's low stock threshold."""
    if update_fields is not None and 'quantity_in_stock' not in update_fields:
        return

    threshold = StoreSettings.load().low_stock_threshold
    status = instance.stock_status(threshold)

    if status == Product.STATUS_LOW_STOCK:
        logger.warning(
            f"LOW STOCK ALERT: {instance.name} (#{instance.pk}) "
            f"has only {instance.quantity_in_stock} units remaining"
        )
    elif status == Product.STATUS_OUT_OF_STOCK:
        logger.error(
            f"OUT OF STOCK: {instance.name} (#{instance.pk}) is out of stock"
        )


# ============================================
# AUDIT TRAIL SIGNALS
# ============================================

@receiver(post_save, sender=StockEntry)
def create_audit_trail(sender, instance, created, **kwargs):
    """Log every stock movement."""
    if created:
        logger.info(
            f"[STOCK MOVEMENT] "
            f"Type: {instance.get_entry_type_display()} | "
            f"Product: #{instance.product_id} ({instance.product.name}) | "
            f"Quantity: {instance.quantity:+d} | "
            f"Stock: {instance.stock_before} → {instance.stock_after} | "
            f"Reference: {instance.reference_id or 'N/A'} | "
            f"User: {instance.created_by.username if instance.created_by else 'System'}"
        )


@receiver(post_delete, sender=StockEntry)
def log_stock_entry_deletion(sender, instance, **kwargs):
    """Stock entries are only removed together with their product."""
    logger.warning(
        f"[AUDIT ALERT] Stock Entry DELETED: "
        f"ID: {instance.id} | "
        f"Type: {instance.entry_type} | "
        f"Product: #{instance.product_id} | "
        f"Quantity: {instance.quantity}"
    )
