from django.db.models.signals import post_save, pre_delete, post_delete
from django.dispatch import receiver
import logging

from .models import Invoice, InvoiceItem

logger = logging.getLogger(__name__)


# ============================================
# INVOICE SIGNALS
# ============================================

@receiver(post_save, sender=Invoice)
def log_invoice_saved(sender, instance, created, **kwargs):
    if created:
        logger.debug(
            f"[INVOICE MONITOR] {instance.invoice_number} saved | "
            f"Customer: {instance.customer_name or 'Walk-in'} | "
            f"Status: {instance.payment_status}"
        )
        return

    logger.info(
        f"[INVOICE UPDATED] {instance.invoice_number} | "
        f"Status: {instance.payment_status} | "
        f"Expected payment: {instance.expected_payment_date or 'N/A'}"
    )


@receiver(pre_delete, sender=Invoice)
def warn_uncancelled_deletion(sender, instance, **kwargs):
    """
    cancel_invoice removes the items before the invoice. Items still present
    here mean the invoice is being deleted directly and stock is not restored.
    """
    remaining = instance.items.filter(product__isnull=False).count()
    if remaining:
        logger.warning(
            f"[AUDIT ALERT] Invoice {instance.invoice_number} deleted without cancellation | "
            f"{remaining} item(s) will not be returned to stock"
        )


@receiver(post_delete, sender=Invoice)
def log_invoice_deleted(sender, instance, **kwargs):
    logger.info(
        f"[INVOICE DELETED] {instance.invoice_number} | "
        f"Grand total: {instance.grand_total}"
    )


# ============================================
# INVOICE ITEM SIGNALS
# ============================================

@receiver(post_save, sender=InvoiceItem)
def log_item_sold(sender, instance, created, **kwargs):
    if not created:
        return

    clamped = instance.stock_deducted is not None and instance.stock_deducted < instance.quantity
    logger.info(
        f"[SALE MONITOR] {instance.invoice.invoice_number} | "
        f"Product: {instance.product_id or 'N/A'} ({instance.product_name}) | "
        f"Quantity Sold: {instance.quantity} | "
        f"Deducted: {instance.stock_deducted if instance.stock_deducted is not None else 'N/A'}"
        f"{' (clamped)' if clamped else ''} | "
        f"Total: {instance.total_price}"
    )
