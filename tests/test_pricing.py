"""
Tests for the invoice arithmetic in invoices.pricing.
"""

from decimal import Decimal

import pytest

from invoices.exceptions import InvalidDiscountError, InvalidLineItemError, InvoiceError
from invoices.pricing import (
    DISCOUNT_FIXED,
    DISCOUNT_PERCENTAGE,
    LineItem,
    calculate_totals,
    discount_value,
    line_total,
    money,
)


class TestLineTotal:

    def test_multiplies_quantity_by_unit_price(self):
        assert line_total(3, Decimal('250.00')) == Decimal('750.00')

    def test_rounds_half_up_to_two_places(self):
        assert line_total(1, Decimal('10.005')) == Decimal('10.01')
        assert line_total(3, Decimal('0.335')) == Decimal('1.01')

    def test_accepts_string_prices(self):
        assert line_total(2, '19.99') == Decimal('39.98')


class TestCalculateTotals:

    def test_worked_example(self):
        totals = calculate_totals(
            [LineItem(quantity=3, unit_price=Decimal('250.00'))],
            discount_amount=Decimal('10'),
            discount_type=DISCOUNT_PERCENTAGE,
            tax_percentage=Decimal('18'),
        )

        assert totals.subtotal == Decimal('750.00')
        assert totals.discount_amount == Decimal('75.00')
        assert totals.tax_amount == Decimal('135.00')
        assert totals.grand_total == Decimal('810.00')
        assert totals.line_totals == [Decimal('750.00')]

    def test_fixed_discount_is_taken_as_is(self):
        totals = calculate_totals(
            [LineItem(2, Decimal('100.00')), LineItem(1, Decimal('49.50'))],
            discount_amount=Decimal('20'),
            discount_type=DISCOUNT_FIXED,
            tax_percentage=Decimal('5'),
        )

        assert totals.subtotal == Decimal('249.50')
        assert totals.discount_amount == Decimal('20.00')
        assert totals.tax_amount == Decimal('12.48')
        assert totals.grand_total == Decimal('241.98')

    def test_grand_total_identity_holds(self):
        items = [
            LineItem(7, Decimal('13.37')),
            LineItem(1, Decimal('0.01')),
            LineItem(12, Decimal('999.99')),
        ]
        totals = calculate_totals(items, Decimal('7.5'), DISCOUNT_PERCENTAGE, Decimal('12.5'))

        assert totals.grand_total == money(totals.subtotal + totals.tax_amount - totals.discount_amount)
        assert totals.subtotal == sum(totals.line_totals)

    def test_empty_item_list_prices_to_zero(self):
        totals = calculate_totals([], discount_amount=0, tax_percentage=18)

        assert totals.subtotal == Decimal('0.00')
        assert totals.tax_amount == Decimal('0.00')
        assert totals.discount_amount == Decimal('0.00')
        assert totals.grand_total == Decimal('0.00')

    def test_discount_larger_than_subtotal_gives_negative_total(self):
        totals = calculate_totals([LineItem(1, Decimal('50.00'))], discount_amount=Decimal('80'))

        assert totals.discount_amount == Decimal('80.00')
        assert totals.grand_total == Decimal('-30.00')

    def test_zero_price_item_is_allowed(self):
        totals = calculate_totals([LineItem(2, Decimal('0'))])
        assert totals.grand_total == Decimal('0.00')

    # -------------------------------------------------------------------------
    # Rejected input
    # -------------------------------------------------------------------------

    @pytest.mark.parametrize('quantity', [0, -1, 1.5, True])
    def test_rejects_bad_quantity(self, quantity):
        with pytest.raises(InvalidLineItemError):
            calculate_totals([LineItem(quantity, Decimal('10.00'))])

    def test_rejects_negative_unit_price(self):
        with pytest.raises(InvalidLineItemError):
            calculate_totals([LineItem(1, Decimal('-0.01'))])

    def test_rejects_non_numeric_unit_price(self):
        with pytest.raises(InvalidLineItemError):
            calculate_totals([LineItem(1, 'ten')])

    def test_rejects_negative_discount(self):
        with pytest.raises(InvalidDiscountError):
            calculate_totals([LineItem(1, Decimal('10.00'))], discount_amount=Decimal('-1'))

    def test_rejects_unknown_discount_type(self):
        with pytest.raises(InvalidDiscountError):
            calculate_totals([LineItem(1, Decimal('10.00'))], discount_amount=1, discount_type='bogus')

    def test_rejects_negative_tax(self):
        with pytest.raises(InvoiceError):
            calculate_totals([LineItem(1, Decimal('10.00'))], tax_percentage=Decimal('-5'))

    def test_errors_are_validation_errors(self):
        from django.core.exceptions import ValidationError

        with pytest.raises(ValidationError) as excinfo:
            calculate_totals([LineItem(0, Decimal('1'))])
        assert excinfo.value.message == 'Quantity must be at least 1'


class TestDiscountValue:

    def test_percentage_of_subtotal(self):
        assert discount_value(Decimal('333.33'), Decimal('10'), DISCOUNT_PERCENTAGE) == Decimal('33.33')

    def test_missing_amount_means_no_discount(self):
        assert discount_value(Decimal('100.00'), None) == Decimal('0.00')
        assert discount_value(Decimal('100.00'), '') == Decimal('0.00')
