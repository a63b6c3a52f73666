"""
Sales, profit and trending rollups.

The rollup_* functions are pure: they take flat rows (dicts) and return
plain data, so they are easy to test. The public report functions load
rows for a date range from the ORM and hand them to the rollups.

Ranges are half-open, [start, end), in the configured time zone.
"""

import calendar
from collections import OrderedDict
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from django.conf import settings
from django.db.models import Count, Sum
from django.utils import timezone

from inventory.models import Product
from inventory.stock import current_threshold
from .models import Invoice, InvoiceItem
from .pricing import ZERO, money


PERIOD_TODAY = 'today'
PERIOD_WEEK = 'week'
PERIOD_MONTH = 'month'
PERIODS = (PERIOD_TODAY, PERIOD_WEEK, PERIOD_MONTH)


# ============================================
# DATE RANGES
# ============================================

def _start_of(day):
    return timezone.make_aware(datetime.combine(day, time.min))


def day_range(day=None):
    day = day or timezone.localdate()
    start = _start_of(day)
    return start, _start_of(day + timedelta(days=1))


def month_range(day=None):
    day = day or timezone.localdate()
    first = day.replace(day=1)
    if first.month == 12:
        following = first.replace(year=first.year + 1, month=1)
    else:
        following = first.replace(month=first.month + 1)
    return _start_of(first), _start_of(following)


def year_range(year=None):
    year = year or timezone.localdate().year
    return _start_of(date(year, 1, 1)), _start_of(date(year + 1, 1, 1))


def _one_month_before(moment):
    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_range(period, now=None):
    """today: since midnight; week: the last 7 days; month: the last month."""
    now = now or timezone.now()
    if period == PERIOD_TODAY:
        return day_range(timezone.localtime(now).date())[0], now
    if period == PERIOD_WEEK:
        return now - timedelta(days=7), now
    if period == PERIOD_MONTH:
        return _one_month_before(timezone.localtime(now)), now
    raise ValueError(f"Unknown period '{period}', expected one of {', '.join(PERIODS)}")


# ============================================
# PURE ROLLUPS
# ============================================

def _group_key(row):
    if row.get('product_id') is not None:
        return ('id', row['product_id'])
    return ('name', row.get('product_name'))


def rollup_sales_total(grand_totals):
    return money(sum((Decimal(value) for value in grand_totals), ZERO))


def rollup_trending(rows, limit=20):
    """
    Group item rows by product, sum quantity and revenue, and keep the
    `limit` best sellers by quantity.
    """
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")

    stats = OrderedDict()
    for row in rows:
        key = _group_key(row)
        if key not in stats:
            stats[key] = {
                'product_id': row.get('product_id'),
                'product_name': row.get('product_name'),
                'total_quantity': 0,
                'total_revenue': ZERO,
            }
        stats[key]['total_quantity'] += row['quantity']
        stats[key]['total_revenue'] += Decimal(row['total_price'])

    ranked = sorted(stats.values(), key=lambda entry: entry['total_quantity'], reverse=True)[:limit]

    for entry in ranked:
        entry['total_revenue'] = money(entry['total_revenue'])
        entry['average_price'] = (
            money(entry['total_revenue'] / entry['total_quantity']) if entry['total_quantity'] else ZERO
        )
    return ranked


def rollup_profit(rows):
    """
    Revenue, cost and profit overall and per product, best earners first.

    Cost is the product's unit cost times quantity; items whose cost is
    unknown count as zero cost.
    """
    products = OrderedDict()
    total_revenue = ZERO
    total_cost = ZERO

    for row in rows:
        revenue = Decimal(row['total_price'])
        cost = Decimal(row.get('cost') or 0) * row['quantity']
        total_revenue += revenue
        total_cost += cost

        key = _group_key(row)
        if key not in products:
            products[key] = {
                'product_id': row.get('product_id'),
                'product_name': row.get('product_name'),
                'total_quantity': 0,
                'total_revenue': ZERO,
                'total_cost': ZERO,
                'total_profit': ZERO,
            }
        entry = products[key]
        entry['total_quantity'] += row['quantity']
        entry['total_revenue'] += revenue
        entry['total_cost'] += cost
        entry['total_profit'] += revenue - cost

    breakdown = sorted(products.values(), key=lambda entry: entry['total_profit'], reverse=True)
    for entry in breakdown:
        quantity = entry['total_quantity']
        for name in ('total_revenue', 'total_cost', 'total_profit'):
            entry[name] = money(entry[name])
        entry['average_price'] = money(entry['total_revenue'] / quantity) if quantity else ZERO
        entry['average_cost'] = money(entry['total_cost'] / quantity) if quantity else ZERO
        entry['average_profit'] = money(entry['total_profit'] / quantity) if quantity else ZERO

    return {
        'total_revenue': money(total_revenue),
        'total_cost': money(total_cost),
        'total_profit': money(total_revenue - total_cost),
        'products': breakdown,
    }


def rollup_product_sales(rows):
    """Quantity and revenue per product name, highest revenue first."""
    products = OrderedDict()
    for row in rows:
        name = row['product_name']
        entry = products.setdefault(name, {'product_name': name, 'quantity': 0, 'revenue': ZERO})
        entry['quantity'] += row['quantity']
        entry['revenue'] += Decimal(row['total_price'])

    ranked = sorted(products.values(), key=lambda entry: entry['revenue'], reverse=True)
    for entry in ranked:
        entry['revenue'] = money(entry['revenue'])
    return ranked


def rollup_monthly(rows, fields):
    """Twelve month buckets; each row carries a `month` (1-12) plus the summed fields."""
    buckets = [
        dict({'month': index, 'label': calendar.month_abbr[index]}, **{name: ZERO for name in fields})
        for index in range(1, 13)
    ]
    for row in rows:
        bucket = buckets[row['month'] - 1]
        for name in fields:
            bucket[name] += Decimal(row.get(name) or 0)

    for bucket in buckets:
        for name in fields:
            bucket[name] = money(bucket[name])
    return buckets


# ============================================
# ORM LOADERS
# ============================================

def _done_invoices(start, end):
    return Invoice.objects.filter(
        payment_status=Invoice.PAYMENT_DONE,
        created_at__gte=start,
        created_at__lt=end,
    )


def _item_rows(start, end, *fields):
    return list(
        InvoiceItem.objects.filter(
            invoice__created_at__gte=start,
            invoice__created_at__lt=end,
        ).values('product_id', 'product_name', 'quantity', 'total_price', *fields)
    )


# ============================================
# REPORTS
# ============================================

def sales_total(start, end):
    """Grand total of settled invoices created in [start, end)."""
    return rollup_sales_total(_done_invoices(start, end).values_list('grand_total', flat=True))


def sales_overview(day=None):
    """Settled sales for the day, the month to date and the year to date."""
    day = day or timezone.localdate()
    day_start, day_end = day_range(day)
    month_start = month_range(day)[0]
    year_start = year_range(day.year)[0]

    return {
        'date': day,
        'today': sales_total(day_start, day_end),
        'month_to_date': sales_total(month_start, day_end),
        'year_to_date': sales_total(year_start, day_end),
    }


def product_sales(day=None):
    """What sold on one day, by product name, from settled invoices."""
    start, end = day_range(day)
    rows = InvoiceItem.objects.filter(
        invoice__payment_status=Invoice.PAYMENT_DONE,
        invoice__created_at__gte=start,
        invoice__created_at__lt=end,
    ).values('product_name', 'quantity', 'total_price')
    return rollup_product_sales(rows)


def trending_products(start, end, limit=None):
    """Best sellers in [start, end); `limit` can only narrow the configured cap."""
    cap = settings.STORE_CONFIG['TRENDING_LIMIT']
    limit = cap if limit is None else min(limit, cap)
    return rollup_trending(_item_rows(start, end), limit=limit)


def profit_breakdown(start, end):
    rows = _item_rows(start, end, 'product__cost')
    for row in rows:
        row['cost'] = row.pop('product__cost')
    return rollup_profit(rows)


def monthly_sales(year=None):
    year = year or timezone.localdate().year
    start, end = year_range(year)
    rows = [
        {'month': timezone.localtime(created_at).month, 'sales': grand_total}
        for created_at, grand_total in Invoice.objects.filter(
            created_at__gte=start, created_at__lt=end
        ).values_list('created_at', 'grand_total')
    ]
    return {'year': year, 'months': rollup_monthly(rows, ['sales'])}


def monthly_profit(year=None):
    year = year or timezone.localdate().year
    start, end = year_range(year)

    rows = []
    for item in InvoiceItem.objects.filter(
        invoice__created_at__gte=start,
        invoice__created_at__lt=end,
    ).values('quantity', 'total_price', 'product__cost', 'invoice__created_at'):
        revenue = Decimal(item['total_price'])
        cost = Decimal(item['product__cost'] or 0) * item['quantity']
        rows.append({
            'month': timezone.localtime(item['invoice__created_at']).month,
            'revenue': revenue,
            'cost': cost,
            'profit': revenue - cost,
        })
    return {'year': year, 'months': rollup_monthly(rows, ['revenue', 'cost', 'profit'])}


def dashboard_stats(period=PERIOD_TODAY, now=None):
    """Headline numbers for the dashboard over today, the last week or the last month."""
    start, end = period_range(period, now=now)
    invoices = Invoice.objects.filter(created_at__gte=start, created_at__lte=end)

    totals = invoices.aggregate(revenue=Sum('grand_total'), count=Count('id'))
    threshold = current_threshold()

    revenue_by_day = OrderedDict()
    for created_at, grand_total in invoices.order_by('created_at').values_list('created_at', 'grand_total'):
        day = timezone.localtime(created_at).date()
        revenue_by_day[day] = revenue_by_day.get(day, ZERO) + grand_total

    return {
        'period': period,
        'start': start,
        'end': end,
        'total_revenue': money(totals['revenue'] or ZERO),
        'total_invoices': totals['count'],
        'total_products': Product.objects.count(),
        'low_stock_count': Product.objects.filter(quantity_in_stock__lte=threshold).count(),
        'low_stock_threshold': threshold,
        'revenue_by_day': [
            {'date': day, 'revenue': money(revenue)} for day, revenue in revenue_by_day.items()
        ],
    }
