"""
Stock level mutations and stock queries.

Every change to Product.quantity_in_stock goes through this module so that
the row is locked while it is read and written back, and a StockEntry is
left behind for the audit trail.
"""

import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import DecimalField, F, Sum

from store.models import StoreSettings
from .models import Product, StockEntry

logger = logging.getLogger(__name__)


def record_entry(product, entry_type, stock_before, stock_after, unit_price=None,
                 reference_id='', user=None, notes=''):
    """Write one StockEntry describing a change from stock_before to stock_after."""
    change = stock_after - stock_before
    unit_price = unit_price if unit_price is not None else Decimal('0.00')
    return StockEntry.objects.create(
        product=product,
        entry_type=entry_type,
        quantity=change,
        stock_before=stock_before,
        stock_after=stock_after,
        unit_price=unit_price,
        total_amount=abs(change) * unit_price,
        reference_id=reference_id,
        notes=notes,
        created_by=user,
    )


def deduct_stock(product, quantity, unit_price=None, reference_id='', user=None):
    """
    Take quantity units of product out of stock.

    The stock level never goes below zero: when fewer units are on hand
    the level is clamped at zero. Returns the number of units actually
    deducted, which is what a later cancellation has to give back.
    """
    if quantity < 0:
        raise ValueError("Quantity to deduct cannot be negative")

    with transaction.atomic():
        locked = Product.objects.select_for_update().get(pk=product.pk)
        before = locked.quantity_in_stock
        after = max(0, before - quantity)
        deducted = before - after

        locked.quantity_in_stock = after
        locked.save(update_fields=['quantity_in_stock', 'updated_at'])

        notes = f"Sold {quantity} unit(s)"
        if deducted < quantity:
            notes += f", only {deducted} in stock"
            logger.warning(
                f"[STOCK CLAMPED] Product: {locked.pk} ({locked.name}) | "
                f"Requested: {quantity} | Available: {before} | Ref: {reference_id or 'N/A'}"
            )

        record_entry(
            locked,
            StockEntry.ENTRY_SALE,
            before,
            after,
            unit_price=unit_price,
            reference_id=reference_id,
            user=user,
            notes=notes,
        )

    product.quantity_in_stock = after
    return deducted


def restore_stock(product, quantity, unit_price=None, reference_id='', user=None):
    """Put quantity units of product back into stock. Returns the new stock level."""
    if quantity < 0:
        raise ValueError("Quantity to restore cannot be negative")

    with transaction.atomic():
        locked = Product.objects.select_for_update().get(pk=product.pk)
        before = locked.quantity_in_stock
        after = before + quantity

        locked.quantity_in_stock = after
        locked.save(update_fields=['quantity_in_stock', 'updated_at'])

        record_entry(
            locked,
            StockEntry.ENTRY_CANCELLATION,
            before,
            after,
            unit_price=unit_price,
            reference_id=reference_id,
            user=user,
            notes=f"Restored {quantity} unit(s) from cancelled sale",
        )

    product.quantity_in_stock = after
    return after


def set_stock(product, quantity, unit_price=None, user=None, notes=''):
    """
    Overwrite the stock level with a counted quantity.

    Records an ADJUSTMENT entry against whatever level the locked row held,
    which may differ from the level the caller last saw. Returns the new level.
    """
    if quantity < 0:
        raise ValueError("Stock level cannot be negative")

    with transaction.atomic():
        locked = Product.objects.select_for_update().get(pk=product.pk)
        before = locked.quantity_in_stock

        if before != quantity:
            locked.quantity_in_stock = quantity
            locked.save(update_fields=['quantity_in_stock', 'updated_at'])
            record_entry(
                locked,
                StockEntry.ENTRY_ADJUSTMENT,
                before,
                quantity,
                unit_price=unit_price,
                user=user,
                notes=f"{notes}: {before} → {quantity}" if notes else f"{before} → {quantity}",
            )

    product.quantity_in_stock = quantity
    return quantity


def editable_fields(product):
    """Concrete columns a catalogue edit may write; the stock counter is not one of them."""
    return [
        field.name for field in product._meta.concrete_fields
        if not field.primary_key and field.name != 'quantity_in_stock'
    ]


def current_threshold(threshold=None):
    if threshold is not None:
        return threshold
    return StoreSettings.load().low_stock_threshold


def low_stock_products(threshold=None, limit=None):
    """Products at or below the low stock threshold, lowest stock first."""
    threshold = current_threshold(threshold)
    if limit is None:
        limit = settings.STORE_CONFIG['LOW_STOCK_LIST_LIMIT']

    queryset = (
        Product.objects.select_related('category')
        .filter(quantity_in_stock__lte=threshold)
        .order_by('quantity_in_stock', 'name')
    )
    return list(queryset[:limit]) if limit else list(queryset)


def inventory_summary(threshold=None):
    """Counts and stock value for the inventory dashboard card."""
    threshold = current_threshold(threshold)
    products = Product.objects.all()

    value = products.filter(cost__isnull=False).aggregate(
        total=Sum(
            F('cost') * F('quantity_in_stock'),
            output_field=DecimalField(max_digits=14, decimal_places=2),
        )
    )['total'] or Decimal('0.00')

    return {
        'total_products': products.count(),
        'low_stock': products.filter(quantity_in_stock__lte=threshold).count(),
        'out_of_stock': products.filter(quantity_in_stock=0).count(),
        'total_units': products.aggregate(total=Sum('quantity_in_stock'))['total'] or 0,
        'inventory_value': value,
        'low_stock_threshold': threshold,
    }
