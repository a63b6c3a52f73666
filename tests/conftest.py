"""
Shared fixtures for the garmentdesk test suite.
"""

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from inventory.models import Category, Size, Color, Product, ProductSizePrice
from store.models import StoreSettings


@pytest.fixture(autouse=True)
def _clear_cache():
    # throttle counters live in the cache
    cache.clear()
    yield
    cache.clear()


# =============================================================================
# USERS AND CLIENTS
# =============================================================================

@pytest.fixture
def user(db):
    return get_user_model().objects.create_user(
        username='cashier',
        password='test-password',
        email='cashier@example.com',
    )


@pytest.fixture
def staff_user(db):
    return get_user_model().objects.create_superuser(
        username='owner',
        password='test-password',
        email='owner@example.com',
    )


@pytest.fixture
def api_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def anonymous_client():
    return APIClient()


# =============================================================================
# STORE AND CATALOGUE
# =============================================================================

@pytest.fixture
def store_settings(db):
    settings_row = StoreSettings.load()
    settings_row.tax_percentage = Decimal('18.00')
    settings_row.low_stock_threshold = 10
    settings_row.save()
    return settings_row


@pytest.fixture
def category(db):
    return Category.objects.create(name='Shirts', description='Casual and formal shirts')


@pytest.fixture
def sizes(db):
    return {
        name: Size.objects.create(name=name, sort_order=position)
        for position, name in enumerate(['S', 'M', 'L', 'XL'], start=1)
    }


@pytest.fixture
def colors(db):
    return {
        'Black': Color.objects.create(name='Black', hex_code='#000000', sort_order=1),
        'White': Color.objects.create(name='White', hex_code='#FFFFFF', sort_order=2),
    }


@pytest.fixture
def shirt(category, sizes, colors):
    product = Product.objects.create(
        name='Linen Shirt',
        sku='SH-001',
        category=category,
        price=Decimal('250.00'),
        cost=Decimal('150.00'),
        quantity_in_stock=20,
    )
    product.sizes.set([sizes['S'], sizes['M'], sizes['L'], sizes['XL']])
    product.colors.set(colors.values())
    ProductSizePrice.objects.create(product=product, size=sizes['XL'], price=Decimal('280.00'))
    return product


@pytest.fixture
def jeans(category):
    return Product.objects.create(
        name='Slim Jeans',
        sku='JN-001',
        category=category,
        price=Decimal('900.00'),
        cost=Decimal('600.00'),
        quantity_in_stock=5,
    )


@pytest.fixture
def scarf(db):
    """A product without a known cost."""
    return Product.objects.create(
        name='Silk Scarf',
        price=Decimal('120.00'),
        quantity_in_stock=3,
    )
