"""
Tests for the sales, profit and trending rollups in invoices.reports.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from invoices import reports
from invoices.models import Invoice
from invoices.services import create_invoice


def _at(year, month, day, hour=12):
    return timezone.make_aware(datetime(year, month, day, hour, 0))


def _sell(items, when, **kwargs):
    invoice = create_invoice(items=items, tax_percentage=Decimal('0'), **kwargs)
    Invoice.objects.filter(pk=invoice.pk).update(created_at=when)
    return invoice


# =============================================================================
# PURE ROLLUPS
# =============================================================================

class TestRollupTrending:

    def test_groups_and_sorts_by_quantity(self):
        rows = [
            {'product_id': 1, 'product_name': 'Shirt', 'quantity': 2, 'total_price': Decimal('500.00')},
            {'product_id': 2, 'product_name': 'Jeans', 'quantity': 1, 'total_price': Decimal('900.00')},
            {'product_id': 1, 'product_name': 'Shirt', 'quantity': 3, 'total_price': Decimal('840.00')},
        ]

        result = reports.rollup_trending(rows)

        assert [entry['product_id'] for entry in result] == [1, 2]
        assert result[0]['total_quantity'] == 5
        assert result[0]['total_revenue'] == Decimal('1340.00')
        assert result[0]['average_price'] == Decimal('268.00')
        assert result[1]['average_price'] == Decimal('900.00')

    def test_caps_at_limit(self):
        rows = [
            {'product_id': index, 'product_name': f'P{index}', 'quantity': index, 'total_price': Decimal('1.00')}
            for index in range(1, 31)
        ]

        result = reports.rollup_trending(rows, limit=20)

        assert len(result) == 20
        assert result[0]['product_id'] == 30
        assert result[-1]['product_id'] == 11

    def test_deleted_products_group_by_name(self):
        rows = [
            {'product_id': None, 'product_name': 'Old Kurta', 'quantity': 1, 'total_price': Decimal('300.00')},
            {'product_id': None, 'product_name': 'Old Kurta', 'quantity': 1, 'total_price': Decimal('300.00')},
            {'product_id': None, 'product_name': 'Old Dupatta', 'quantity': 1, 'total_price': Decimal('150.00')},
        ]

        result = reports.rollup_trending(rows)

        assert len(result) == 2
        assert result[0]['product_name'] == 'Old Kurta'
        assert result[0]['total_quantity'] == 2

    def test_empty(self):
        assert reports.rollup_trending([]) == []

    @pytest.mark.parametrize('limit', [0, -1])
    def test_rejects_limit_below_one(self, limit):
        rows = [{'product_id': 1, 'product_name': 'Shirt', 'quantity': 1, 'total_price': Decimal('250.00')}]
        with pytest.raises(ValueError):
            reports.rollup_trending(rows, limit=limit)


class TestRollupProfit:

    def test_totals_and_breakdown(self):
        rows = [
            {'product_id': 1, 'product_name': 'Shirt', 'quantity': 2, 'total_price': Decimal('500.00'), 'cost': Decimal('150.00')},
            {'product_id': 2, 'product_name': 'Jeans', 'quantity': 1, 'total_price': Decimal('900.00'), 'cost': Decimal('600.00')},
            {'product_id': 3, 'product_name': 'Scarf', 'quantity': 1, 'total_price': Decimal('120.00'), 'cost': None},
        ]

        result = reports.rollup_profit(rows)

        assert result['total_revenue'] == Decimal('1520.00')
        assert result['total_cost'] == Decimal('900.00')
        assert result['total_profit'] == Decimal('620.00')
        assert [entry['product_name'] for entry in result['products']] == ['Jeans', 'Shirt', 'Scarf']

        shirt = result['products'][1]
        assert shirt['total_cost'] == Decimal('300.00')
        assert shirt['total_profit'] == Decimal('200.00')
        assert shirt['average_price'] == Decimal('250.00')
        assert shirt['average_cost'] == Decimal('150.00')
        assert shirt['average_profit'] == Decimal('100.00')

        scarf = result['products'][2]
        assert scarf['total_cost'] == Decimal('0.00')
        assert scarf['total_profit'] == Decimal('120.00')


class TestRollupMonthly:

    def test_twelve_buckets(self):
        rows = [
            {'month': 1, 'sales': Decimal('100.00')},
            {'month': 1, 'sales': Decimal('50.00')},
            {'month': 12, 'sales': Decimal('10.00')},
        ]

        buckets = reports.rollup_monthly(rows, ['sales'])

        assert len(buckets) == 12
        assert buckets[0] == {'month': 1, 'label': 'Jan', 'sales': Decimal('150.00')}
        assert buckets[5]['sales'] == Decimal('0.00')
        assert buckets[11]['sales'] == Decimal('10.00')


class TestRollupProductSales:

    def test_sorted_by_revenue(self):
        rows = [
            {'product_name': 'Shirt', 'quantity': 3, 'total_price': Decimal('750.00')},
            {'product_name': 'Jeans', 'quantity': 1, 'total_price': Decimal('900.00')},
            {'product_name': 'Shirt', 'quantity': 1, 'total_price': Decimal('250.00')},
        ]

        result = reports.rollup_product_sales(rows)

        assert result == [
            {'product_name': 'Shirt', 'quantity': 4, 'revenue': Decimal('1000.00')},
            {'product_name': 'Jeans', 'quantity': 1, 'revenue': Decimal('900.00')},
        ]


# =============================================================================
# DATE RANGES
# =============================================================================

class TestRanges:

    def test_day_range_is_half_open(self):
        start, end = reports.day_range(date(2026, 3, 31))
        assert timezone.localtime(start).date() == date(2026, 3, 31)
        assert end - start == timedelta(days=1)

    def test_month_range_rolls_over_december(self):
        start, end = reports.month_range(date(2026, 12, 15))
        assert timezone.localtime(start).date() == date(2026, 12, 1)
        assert timezone.localtime(end).date() == date(2027, 1, 1)

    def test_year_range(self):
        start, end = reports.year_range(2026)
        assert timezone.localtime(start).date() == date(2026, 1, 1)
        assert timezone.localtime(end).date() == date(2027, 1, 1)

    def test_month_period_clamps_day(self):
        now = _at(2026, 3, 31)
        start, end = reports.period_range(reports.PERIOD_MONTH, now=now)
        assert timezone.localtime(start).date() == date(2026, 2, 28)
        assert end == now

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            reports.period_range('decade')


# =============================================================================
# ORM REPORTS
# =============================================================================

@pytest.mark.django_db
class TestReports:

    def test_sales_total_counts_only_done_invoices(self, shirt, jeans):
        _sell([{'product': shirt, 'quantity': 2}], _at(2026, 5, 10))
        _sell([{'product': jeans, 'quantity': 1}], _at(2026, 5, 10), payment_status=Invoice.PAYMENT_PENDING)
        _sell([{'product': shirt, 'quantity': 1}], _at(2026, 5, 11))

        start, end = reports.day_range(date(2026, 5, 10))
        assert reports.sales_total(start, end) == Decimal('500.00')

    def test_sales_overview(self, shirt):
        _sell([{'product': shirt, 'quantity': 1}], _at(2026, 1, 5))
        _sell([{'product': shirt, 'quantity': 1}], _at(2026, 5, 2))
        _sell([{'product': shirt, 'quantity': 2}], _at(2026, 5, 10))
        _sell([{'product': shirt, 'quantity': 1}], _at(2026, 5, 11))

        overview = reports.sales_overview(date(2026, 5, 10))

        assert overview['today'] == Decimal('500.00')
        assert overview['month_to_date'] == Decimal('750.00')
        assert overview['year_to_date'] == Decimal('1000.00')

    def test_product_sales(self, shirt, jeans):
        _sell([{'product': shirt, 'quantity': 2}, {'product': jeans, 'quantity': 1}], _at(2026, 5, 10))
        _sell([{'product': shirt, 'quantity': 1}], _at(2026, 5, 10))

        rows = reports.product_sales(date(2026, 5, 10))

        assert rows[0] == {'product_name': 'Slim Jeans', 'quantity': 1, 'revenue': Decimal('900.00')}
        assert rows[1] == {'product_name': 'Linen Shirt', 'quantity': 3, 'revenue': Decimal('750.00')}

    def test_trending_products(self, shirt, jeans):
        _sell([{'product': shirt, 'quantity': 3}, {'product': jeans, 'quantity': 1}], _at(2026, 5, 10))
        _sell([{'product': jeans, 'quantity': 1}], _at(2026, 5, 11))
        _sell([{'product': jeans, 'quantity': 3}], _at(2026, 6, 1))

        start, end = reports.month_range(date(2026, 5, 1))
        rows = reports.trending_products(start, end)

        assert [row['product_id'] for row in rows] == [shirt.pk, jeans.pk]
        assert rows[0]['total_quantity'] == 3
        assert rows[1]['total_quantity'] == 2
        assert rows[1]['average_price'] == Decimal('900.00')

    def test_profit_breakdown(self, shirt, scarf):
        _sell([{'product': shirt, 'quantity': 2}, {'product': scarf, 'quantity': 1}], _at(2026, 5, 10))

        start, end = reports.day_range(date(2026, 5, 10))
        result = reports.profit_breakdown(start, end)

        assert result['total_revenue'] == Decimal('620.00')
        assert result['total_cost'] == Decimal('300.00')
        assert result['total_profit'] == Decimal('320.00')
        assert result['products'][0]['product_name'] == 'Linen Shirt'

    def test_monthly_sales_and_profit(self, shirt):
        _sell([{'product': shirt, 'quantity': 1}], _at(2026, 2, 14))
        _sell([{'product': shirt, 'quantity': 2}], _at(2026, 2, 20))
        _sell([{'product': shirt, 'quantity': 1}], _at(2025, 2, 20))

        sales = reports.monthly_sales(2026)
        assert sales['months'][1]['sales'] == Decimal('750.00')
        assert sum(bucket['sales'] for bucket in sales['months']) == Decimal('750.00')

        profit = reports.monthly_profit(2026)
        february = profit['months'][1]
        assert february['revenue'] == Decimal('750.00')
        assert february['cost'] == Decimal('450.00')
        assert february['profit'] == Decimal('300.00')

    def test_dashboard_stats(self, store_settings, shirt, jeans):
        now = timezone.now()
        _sell([{'product': shirt, 'quantity': 1}], now - timedelta(days=3))
        _sell([{'product': jeans, 'quantity': 1}], now - timedelta(days=20))

        week = reports.dashboard_stats(reports.PERIOD_WEEK, now=now)
        assert week['total_revenue'] == Decimal('250.00')
        assert week['total_invoices'] == 1
        assert week['total_products'] == 2
        assert week['low_stock_count'] == 1
        assert len(week['revenue_by_day']) == 1

        month = reports.dashboard_stats(reports.PERIOD_MONTH, now=now)
        assert month['total_invoices'] == 2
        assert month['total_revenue'] == Decimal('1150.00')
