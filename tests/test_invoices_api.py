"""
Tests for the invoice and report REST endpoints.
"""

from datetime import datetime

import pytest
from django.contrib.admin.sites import AdminSite
from django.contrib.messages.storage.fallback import FallbackStorage
from django.test import RequestFactory
from django.urls import reverse
from django.utils import timezone

from inventory.models import Product
from invoices.admin import InvoiceAdmin
from invoices.models import Invoice
from invoices.services import create_invoice

pytestmark = pytest.mark.django_db


def _stock(product):
    return Product.objects.get(pk=product.pk).quantity_in_stock


# =============================================================================
# INVOICES
# =============================================================================

class TestInvoiceApi:

    def test_create_invoice(self, api_client, user, store_settings, shirt):
        response = api_client.post(reverse('invoices:invoice-list'), {
            'customer_name': 'Meera',
            'customer_phone': '9876543210',
            'discount_amount': '10',
            'discount_type': 'percentage',
            'items': [
                {'product': shirt.pk, 'quantity': 3, 'unit_price': '250.00', 'size_name': 'M', 'color_name': 'Black'},
            ],
        }, format='json')

        assert response.status_code == 201
        assert response.data['subtotal'] == '750.00'
        assert response.data['discount_amount'] == '75.00'
        assert response.data['tax_amount'] == '135.00'
        assert response.data['grand_total'] == '810.00'
        assert response.data['created_by_username'] == user.username
        assert response.data['items'][0]['color_name'] == 'Black'
        assert _stock(shirt) == 17

    def test_create_uses_size_price_when_price_missing(self, api_client, shirt):
        response = api_client.post(reverse('invoices:invoice-list'), {
            'tax_percentage': '0',
            'items': [{'product': shirt.pk, 'quantity': 1, 'size_name': 'XL'}],
        }, format='json')

        assert response.status_code == 201
        assert response.data['grand_total'] == '280.00'

    def test_rejects_empty_items(self, api_client):
        response = api_client.post(reverse('invoices:invoice-list'), {'items': []}, format='json')
        assert response.status_code == 400
        assert Invoice.objects.count() == 0

    @pytest.mark.parametrize('item', [
        {'quantity': 0, 'unit_price': '10.00', 'product_name': 'Tee'},
        {'quantity': 1, 'unit_price': '-10.00', 'product_name': 'Tee'},
        {'quantity': 1, 'unit_price': '10.00'},
    ])
    def test_rejects_invalid_items(self, api_client, item):
        response = api_client.post(reverse('invoices:invoice-list'), {'items': [item]}, format='json')
        assert response.status_code == 400

    def test_rejects_negative_discount(self, api_client, shirt):
        response = api_client.post(reverse('invoices:invoice-list'), {
            'discount_amount': '-5',
            'items': [{'product': shirt.pk, 'quantity': 1}],
        }, format='json')
        assert response.status_code == 400
        assert _stock(shirt) == 20

    def test_rejects_overlong_customer_name(self, api_client, shirt):
        response = api_client.post(reverse('invoices:invoice-list'), {
            'customer_name': 'x' * 121,
            'items': [{'product': shirt.pk, 'quantity': 1}],
        }, format='json')
        assert response.status_code == 400

    def test_domain_error_is_json_message(self, api_client):
        response = api_client.post(reverse('invoices:invoice-list'), {
            'items': [{'product_name': 'Alteration', 'quantity': 1}],
        }, format='json')

        assert response.status_code == 400
        assert response.data == {
            'success': False,
            'message': "Unit price is required for 'Alteration'",
        }

    def test_list_and_filter(self, api_client, shirt):
        create_invoice(items=[{'product': shirt, 'quantity': 1}], customer_name='Ravi')
        create_invoice(
            items=[{'product': shirt, 'quantity': 1}],
            customer_name='Sita',
            payment_status=Invoice.PAYMENT_PENDING,
        )

        response = api_client.get(reverse('invoices:invoice-list'))
        assert response.data['count'] == 2

        response = api_client.get(reverse('invoices:invoice-list'), {'payment_status': 'pending'})
        assert [row['customer_name'] for row in response.data['results']] == ['Sita']

        response = api_client.get(reverse('invoices:invoice-list'), {'customer': 'rav'})
        assert [row['customer_name'] for row in response.data['results']] == ['Ravi']

    def test_delete_cancels_and_restores_stock(self, api_client, jeans):
        invoice = create_invoice(items=[{'product': jeans, 'quantity': 2}])
        assert _stock(jeans) == 3

        response = api_client.delete(reverse('invoices:invoice-detail', args=[invoice.pk]))

        assert response.status_code == 200
        assert response.data['success'] is True
        assert response.data['units_restored'] == 2
        assert _stock(jeans) == 5
        assert not Invoice.objects.exists()

    def test_invoices_cannot_be_edited_in_place(self, api_client, shirt):
        invoice = create_invoice(items=[{'product': shirt, 'quantity': 1}])
        response = api_client.patch(
            reverse('invoices:invoice-detail', args=[invoice.pk]),
            {'grand_total': '1.00'},
            format='json',
        )
        assert response.status_code == 405

    def test_payment_status(self, api_client, shirt):
        invoice = create_invoice(items=[{'product': shirt, 'quantity': 1}])
        url = reverse('invoices:invoice-payment-status', args=[invoice.pk])

        response = api_client.post(url, {
            'payment_status': 'pending',
            'expected_payment_date': '2026-11-30',
        }, format='json')
        assert response.status_code == 200
        assert response.data['expected_payment_date'] == '2026-11-30'

        response = api_client.post(url, {
            'payment_status': 'done',
            'expected_payment_date': '2026-12-31',
        }, format='json')
        assert response.data['payment_status'] == 'done'
        assert response.data['expected_payment_date'] is None

    def test_payment_status_rejects_unknown_value(self, api_client, shirt):
        invoice = create_invoice(items=[{'product': shirt, 'quantity': 1}])
        response = api_client.post(
            reverse('invoices:invoice-payment-status', args=[invoice.pk]),
            {'payment_status': 'refunded'},
            format='json',
        )
        assert response.status_code == 400

    def test_quote(self, api_client, store_settings, shirt):
        response = api_client.post(reverse('invoices:invoice-quote'), {
            'discount_amount': '10',
            'discount_type': 'percentage',
            'items': [{'product': shirt.pk, 'quantity': 3}],
        }, format='json')

        assert response.status_code == 200
        assert response.data['grand_total'] == '810.00'
        assert response.data['tax_percentage'] == '18.00'
        assert response.data['items'][0]['product_name'] == 'Linen Shirt'
        assert Invoice.objects.count() == 0
        assert _stock(shirt) == 20


# =============================================================================
# ADMIN
# =============================================================================

class TestInvoiceAdmin:

    def test_admin_delete_restores_stock(self, staff_user, jeans):
        invoice = create_invoice(items=[{'product': jeans, 'quantity': 3}])
        request = RequestFactory().post('/')
        request.user = staff_user
        request.session = 'session'
        request._messages = FallbackStorage(request)

        InvoiceAdmin(Invoice, AdminSite()).delete_queryset(request, Invoice.objects.all())

        assert _stock(jeans) == 5
        assert not Invoice.objects.exists()

    def test_admin_changelist_renders(self, client, staff_user, shirt):
        create_invoice(items=[{'product': shirt, 'quantity': 1}], customer_name='Ravi')
        client.force_login(staff_user)

        response = client.get(reverse('admin:invoices_invoice_changelist'))
        assert response.status_code == 200
        assert b'Ravi' in response.content


# =============================================================================
# REPORTS
# =============================================================================

def _sell_on(product, quantity, when, **kwargs):
    invoice = create_invoice(items=[{'product': product, 'quantity': quantity}], tax_percentage=0, **kwargs)
    Invoice.objects.filter(pk=invoice.pk).update(created_at=when)
    return invoice


def _at(year, month, day):
    return timezone.make_aware(datetime(year, month, day, 12, 0))


class TestReportApi:

    def test_overview(self, api_client, shirt):
        _sell_on(shirt, 2, _at(2026, 5, 10))
        _sell_on(shirt, 1, _at(2026, 5, 10), payment_status=Invoice.PAYMENT_PENDING)

        response = api_client.get(reverse('invoices:report-overview'), {'date': '2026-05-10'})

        assert response.status_code == 200
        assert response.data['today'] == '500.00'
        assert response.data['year_to_date'] == '500.00'

    def test_product_sales(self, api_client, shirt, jeans):
        _sell_on(shirt, 2, _at(2026, 5, 10))
        _sell_on(jeans, 1, _at(2026, 5, 10))

        response = api_client.get(reverse('invoices:report-product-sales'), {'date': '2026-05-10'})
        assert [row['product_name'] for row in response.data['products']] == ['Slim Jeans', 'Linen Shirt']
        assert response.data['products'][0]['revenue'] == '900.00'

    def test_trending_by_month(self, api_client, shirt, jeans):
        _sell_on(shirt, 3, _at(2026, 5, 10))
        _sell_on(jeans, 1, _at(2026, 5, 12))

        response = api_client.get(reverse('invoices:report-trending'), {'range': 'month', 'date': '2026-05-01'})

        assert response.status_code == 200
        assert [row['product_name'] for row in response.data['products']] == ['Linen Shirt', 'Slim Jeans']
        assert response.data['products'][0]['total_quantity'] == 3
        assert response.data['products'][0]['average_price'] == '250.00'

    def test_trending_explicit_range_and_limit(self, api_client, shirt, jeans):
        _sell_on(shirt, 3, _at(2026, 5, 10))
        _sell_on(jeans, 1, _at(2026, 5, 12))

        response = api_client.get(reverse('invoices:report-trending'), {
            'start': '2026-05-12', 'end': '2026-05-12', 'limit': 5,
        })
        assert [row['product_name'] for row in response.data['products']] == ['Slim Jeans']

    @pytest.mark.parametrize('limit', ['0', '-1'])
    def test_trending_rejects_limit_below_one(self, api_client, shirt, jeans, scarf, limit):
        for product in (shirt, jeans, scarf):
            _sell_on(product, 1, _at(2026, 5, 10))

        response = api_client.get(reverse('invoices:report-trending'), {
            'range': 'month', 'date': '2026-05-01', 'limit': limit,
        })
        assert response.status_code == 400
        assert response.data['success'] is False

    def test_trending_limit_cannot_exceed_configured_cap(self, api_client, settings, shirt, jeans, scarf):
        settings.STORE_CONFIG = {**settings.STORE_CONFIG, 'TRENDING_LIMIT': 2}
        _sell_on(shirt, 3, _at(2026, 5, 10))
        _sell_on(jeans, 2, _at(2026, 5, 10))
        _sell_on(scarf, 1, _at(2026, 5, 10))

        response = api_client.get(reverse('invoices:report-trending'), {
            'range': 'month', 'date': '2026-05-01', 'limit': 50,
        })
        assert [row['product_name'] for row in response.data['products']] == ['Linen Shirt', 'Slim Jeans']

    def test_trending_rejects_half_range(self, api_client):
        response = api_client.get(reverse('invoices:report-trending'), {'start': '2026-05-12'})
        assert response.status_code == 400

    def test_profits(self, api_client, shirt, scarf):
        _sell_on(shirt, 2, _at(2026, 5, 10))
        _sell_on(scarf, 1, _at(2026, 5, 10))

        response = api_client.get(reverse('invoices:report-profits'), {'range': 'year', 'date': '2026-05-10'})

        assert response.data['total_revenue'] == '620.00'
        assert response.data['total_cost'] == '300.00'
        assert response.data['total_profit'] == '320.00'

    def test_monthly_reports(self, api_client, shirt):
        _sell_on(shirt, 2, _at(2026, 3, 3))

        response = api_client.get(reverse('invoices:report-monthly-sales'), {'year': 2026})
        assert len(response.data['months']) == 12
        assert response.data['months'][2]['sales'] == '500.00'

        response = api_client.get(reverse('invoices:report-monthly-profit'), {'year': 2026})
        assert response.data['months'][2]['profit'] == '200.00'

        response = api_client.get(reverse('invoices:report-monthly-sales'), {'year': 'soon'})
        assert response.status_code == 400

    def test_dashboard(self, api_client, store_settings, shirt, jeans):
        create_invoice(items=[{'product': shirt, 'quantity': 1}], tax_percentage=0)

        response = api_client.get(reverse('invoices:report-dashboard'), {'period': 'today'})

        assert response.status_code == 200
        assert response.data['total_revenue'] == '250.00'
        assert response.data['total_invoices'] == 1
        assert response.data['total_products'] == 2
        assert response.data['low_stock_count'] == 1

    def test_dashboard_rejects_unknown_period(self, api_client):
        response = api_client.get(reverse('invoices:report-dashboard'), {'period': 'decade'})
        assert response.status_code == 400
