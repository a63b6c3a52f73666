"""
Invoice arithmetic.

Pure functions only: no database access, so the same rules price a saved
invoice and a draft quote.

    line_total   = round(quantity * unit_price, 2)
    subtotal     = sum of line totals
    discount     = subtotal * amount / 100   (percentage)
                   amount                    (fixed)
    tax_amount   = subtotal * tax_percentage / 100
    grand_total  = subtotal + tax_amount - discount

A discount larger than the subtotal is not clamped; the grand total is
allowed to go negative.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional

from .exceptions import InvalidDiscountError, InvalidLineItemError, InvoiceError

TWO_PLACES = Decimal('0.01')
ZERO = Decimal('0.00')

DISCOUNT_FIXED = 'fixed'
DISCOUNT_PERCENTAGE = 'percentage'
DISCOUNT_TYPES = (DISCOUNT_FIXED, DISCOUNT_PERCENTAGE)


def money(value) -> Decimal:
    """Quantize to two decimal places, rounding half up."""
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def to_decimal(value, label='Value', error=InvalidLineItemError) -> Decimal:
    if value is None or value == '':
        return ZERO
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise error(f'{label} must be a number')


@dataclass(frozen=True)
class LineItem:
    quantity: int
    unit_price: Decimal
    product_id: Optional[int] = None

    def validate(self):
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise InvalidLineItemError('Quantity must be a whole number')
        if self.quantity < 1:
            raise InvalidLineItemError('Quantity must be at least 1')
        if to_decimal(self.unit_price, 'Unit price') < 0:
            raise InvalidLineItemError('Unit price cannot be negative')


@dataclass
class InvoiceTotals:
    subtotal: Decimal = ZERO
    discount_amount: Decimal = ZERO
    tax_amount: Decimal = ZERO
    grand_total: Decimal = ZERO
    line_totals: List[Decimal] = field(default_factory=list)

    def as_dict(self):
        return {
            'subtotal': self.subtotal,
            'discount_amount': self.discount_amount,
            'tax_amount': self.tax_amount,
            'grand_total': self.grand_total,
            'line_totals': list(self.line_totals),
        }


def line_total(quantity, unit_price) -> Decimal:
    return money(Decimal(quantity) * to_decimal(unit_price, 'Unit price'))


def discount_value(subtotal, amount, discount_type=DISCOUNT_FIXED) -> Decimal:
    """Turn a discount input into the money amount taken off the invoice."""
    if discount_type not in DISCOUNT_TYPES:
        raise InvalidDiscountError(f"Unknown discount type '{discount_type}'")

    amount = to_decimal(amount, 'Discount', InvalidDiscountError)
    if amount < 0:
        raise InvalidDiscountError('Discount cannot be negative')

    if discount_type == DISCOUNT_PERCENTAGE:
        return money(Decimal(subtotal) * amount / 100)
    return money(amount)


def tax_value(subtotal, tax_percentage) -> Decimal:
    tax_percentage = to_decimal(tax_percentage, 'Tax percentage', InvoiceError)
    if tax_percentage < 0:
        raise InvoiceError('Tax percentage cannot be negative')
    return money(Decimal(subtotal) * tax_percentage / 100)


def calculate_totals(items, discount_amount=0, discount_type=DISCOUNT_FIXED, tax_percentage=0):
    """
    Price a list of LineItem.

    An empty list prices to all zeros; refusing to save an empty invoice is
    the caller's decision.
    """
    line_totals = []
    for item in items:
        item.validate()
        line_totals.append(line_total(item.quantity, item.unit_price))

    subtotal = money(sum(line_totals, ZERO))
    discount = discount_value(subtotal, discount_amount, discount_type)
    tax = tax_value(subtotal, tax_percentage)

    return InvoiceTotals(
        subtotal=subtotal,
        discount_amount=discount,
        tax_amount=tax,
        grand_total=money(subtotal + tax - discount),
        line_totals=line_totals,
    )
