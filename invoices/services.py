"""
Sale and cancellation workflow.

create_invoice prices the items, saves the invoice with its item snapshot
and takes the sold units out of stock, all in one transaction. cancel_invoice
gives back exactly what the sale took and removes the invoice.
"""

import logging

from django.db import transaction

from inventory.models import Size
from inventory.stock import deduct_stock, restore_stock
from store.models import StoreSettings
from .exceptions import EmptyInvoiceError, InvalidLineItemError, InvoiceError
from .models import Invoice, InvoiceItem
from .pricing import DISCOUNT_PERCENTAGE, LineItem, calculate_totals, to_decimal

logger = logging.getLogger(__name__)


# ============================================
# ITEM PREPARATION
# ============================================

def resolve_unit_price(product, size_name=''):
    """Size-specific price when one is set for the product, else its base price."""
    size = Size.objects.filter(name=size_name).first() if size_name else None
    return product.price_for_size(size)


def _prepare_item(raw):
    """Fill in defaults for one item dict and check it can be sold."""
    product = raw.get('product')
    size_name = (raw.get('size_name') or '').strip()
    color_name = (raw.get('color_name') or '').strip()
    product_name = (raw.get('product_name') or '').strip()

    if product is None and not product_name:
        raise InvalidLineItemError('Each item needs a product or a product name')
    if product is not None and not product_name:
        product_name = product.name

    unit_price = raw.get('unit_price')
    if unit_price is None or unit_price == '':
        if product is None:
            raise InvalidLineItemError(f"Unit price is required for '{product_name}'")
        unit_price = resolve_unit_price(product, size_name)

    item = {
        'product': product,
        'product_name': product_name,
        'size_name': size_name,
        'color_name': color_name,
        'quantity': raw.get('quantity'),
        'unit_price': to_decimal(unit_price, 'Unit price'),
    }
    item['line'] = LineItem(
        quantity=item['quantity'],
        unit_price=item['unit_price'],
        product_id=product.pk if product is not None else None,
    )
    return item


def _prepare_items(items):
    if not items:
        raise EmptyInvoiceError()
    return [_prepare_item(raw) for raw in items]


def _resolve_tax(tax_percentage):
    if tax_percentage is None:
        return StoreSettings.load().tax_percentage
    return tax_percentage


# ============================================
# QUOTE
# ============================================

def quote(items, discount_amount=0, discount_type=DISCOUNT_PERCENTAGE, tax_percentage=None):
    """Price a draft invoice without saving anything or touching stock."""
    prepared = _prepare_items(items)
    tax_percentage = _resolve_tax(tax_percentage)
    totals = calculate_totals(
        [item['line'] for item in prepared],
        discount_amount=discount_amount,
        discount_type=discount_type,
        tax_percentage=tax_percentage,
    )

    result = totals.as_dict()
    result['tax_percentage'] = to_decimal(tax_percentage)
    result['discount_type'] = discount_type
    result['items'] = [
        {
            'product': item['product'].pk if item['product'] is not None else None,
            'product_name': item['product_name'],
            'size_name': item['size_name'],
            'color_name': item['color_name'],
            'quantity': item['quantity'],
            'unit_price': item['unit_price'],
            'total_price': total,
        }
        for item, total in zip(prepared, totals.line_totals)
    ]
    del result['line_totals']
    return result


# ============================================
# SALE
# ============================================

def create_invoice(items, customer_name='', customer_phone='', discount_amount=0,
                   discount_type=DISCOUNT_PERCENTAGE, tax_percentage=None,
                   payment_status=Invoice.PAYMENT_DONE, expected_payment_date=None, user=None):
    """
    Save an invoice and deduct its items from stock.

    items is a list of dicts with product (Product or None), product_name,
    size_name, color_name, quantity and an optional unit_price. Stock never
    goes below zero; the units actually deducted are kept on each item so a
    cancellation can give back exactly that many.
    """
    prepared = _prepare_items(items)
    tax_percentage = _resolve_tax(tax_percentage)
    totals = calculate_totals(
        [item['line'] for item in prepared],
        discount_amount=discount_amount,
        discount_type=discount_type,
        tax_percentage=tax_percentage,
    )
    _check_payment_status(payment_status)

    try:
        with transaction.atomic():
            invoice = Invoice.objects.create(
                customer_name=(customer_name or '').strip(),
                customer_phone=(customer_phone or '').strip(),
                subtotal=totals.subtotal,
                tax_percentage=to_decimal(tax_percentage),
                tax_amount=totals.tax_amount,
                discount_amount=totals.discount_amount,
                discount_type=discount_type,
                grand_total=totals.grand_total,
                payment_status=payment_status,
                expected_payment_date=expected_payment_date,
                created_by=user,
            )

            for item in prepared:
                product = item['product']
                deducted = None
                if product is not None:
                    deducted = deduct_stock(
                        product,
                        item['quantity'],
                        unit_price=item['unit_price'],
                        reference_id=invoice.invoice_number,
                        user=user,
                    )

                InvoiceItem.objects.create(
                    invoice=invoice,
                    product=product,
                    product_name=item['product_name'],
                    size_name=item['size_name'],
                    color_name=item['color_name'],
                    quantity=item['quantity'],
                    unit_price=item['unit_price'],
                    stock_deducted=deducted,
                )
    except InvoiceError:
        raise
    except Exception as e:
        logger.exception(f"[INVOICE ERROR] Failed to create invoice for {customer_name or 'Walk-in'}: {e}")
        raise

    logger.info(
        f"[INVOICE CREATED] {invoice.invoice_number} | "
        f"Customer: {invoice.customer_name or 'Walk-in'} | "
        f"Items: {len(prepared)} | Grand total: {invoice.grand_total} | "
        f"User: {user.username if user else 'System'}"
    )
    return invoice


# ============================================
# CANCELLATION
# ============================================

def cancel_invoice(invoice, user=None):
    """
    Restore stock for every item of the invoice, then delete it.

    Returns a summary dict with the invoice number and the units restored.
    """
    invoice_number = invoice.invoice_number
    restored_units = 0

    try:
        with transaction.atomic():
            invoice = Invoice.objects.select_for_update().get(pk=invoice.pk)
            items = list(invoice.items.select_related('product'))

            for item in items:
                quantity = item.restorable_quantity
                if item.product is None or not quantity:
                    continue
                restore_stock(
                    item.product,
                    quantity,
                    unit_price=item.unit_price,
                    reference_id=invoice_number,
                    user=user,
                )
                restored_units += quantity

            invoice.items.all().delete()
            invoice.delete()
    except Exception as e:
        logger.exception(f"[CANCEL ERROR] Failed to cancel invoice {invoice_number}: {e}")
        raise

    logger.info(
        f"[INVOICE CANCELLED] {invoice_number} | Items: {len(items)} | "
        f"Units restored: {restored_units} | User: {user.username if user else 'System'}"
    )
    return {
        'invoice_number': invoice_number,
        'items': len(items),
        'units_restored': restored_units,
    }


# ============================================
# PAYMENT STATUS
# ============================================

def _check_payment_status(payment_status):
    valid = dict(Invoice.PAYMENT_STATUS_CHOICES)
    if payment_status not in valid:
        raise InvoiceError(f"Unknown payment status '{payment_status}'")


def update_payment_status(invoice, payment_status, expected_payment_date=None, user=None):
    """The expected payment date is only kept while the invoice is pending."""
    _check_payment_status(payment_status)

    old_status = invoice.payment_status
    invoice.payment_status = payment_status
    invoice.expected_payment_date = (
        expected_payment_date if payment_status == Invoice.PAYMENT_PENDING else None
    )
    invoice.save(update_fields=['payment_status', 'expected_payment_date', 'updated_at'])

    logger.info(
        f"[PAYMENT STATUS] {invoice.invoice_number} | {old_status} → {payment_status} | "
        f"Expected: {invoice.expected_payment_date or 'N/A'} | "
        f"User: {user.username if user else 'System'}"
    )
    return invoice
