from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator, RegexValidator
from django.db import models


class Category(models.Model):
    name = models.CharField(max_length=120, unique=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'Categories'

    def __str__(self):
        return self.name


class Size(models.Model):
    name = models.CharField(max_length=40, unique=True)
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['sort_order', 'name']

    def __str__(self):
        return self.name


class Color(models.Model):
    name = models.CharField(max_length=60, unique=True)
    hex_code = models.CharField(
        max_length=7,
        blank=True,
        validators=[RegexValidator(r'^#[0-9A-Fa-f]{6}$', 'Use the #RRGGBB format')],
    )
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['sort_order', 'name']

    def __str__(self):
        return self.name


class Product(models.Model):
    """
    A garment on sale.

    quantity_in_stock is the single stock counter; sales and cancellations
    move it through inventory.stock, which also writes a StockEntry.
    """

    STATUS_AVAILABLE = 'available'
    STATUS_LOW_STOCK = 'lowstock'
    STATUS_OUT_OF_STOCK = 'outofstock'

    name = models.CharField(max_length=200)
    sku = models.CharField(max_length=120, unique=True, null=True, blank=True)
    description = models.TextField(blank=True)
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products',
    )
    sizes = models.ManyToManyField(Size, blank=True, related_name='products')
    colors = models.ManyToManyField(Color, blank=True, related_name='products')

    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
    )
    cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0'))],
    )
    quantity_in_stock = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['quantity_in_stock'], name='idx_product_stock'),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})" if self.sku else self.name

    def save(self, *args, **kwargs):
        # blank SKUs are stored as NULL so the unique constraint ignores them
        if self.sku is not None:
            self.sku = self.sku.strip() or None
        super().save(*args, **kwargs)

    @property
    def profit_margin(self):
        return (self.price or Decimal('0.00')) - (self.cost or Decimal('0.00'))

    @property
    def profit_percentage(self):
        if not self.cost:
            return None
        return float(self.profit_margin / self.cost * 100)

    @property
    def inventory_value(self):
        return (self.cost or Decimal('0.00')) * self.quantity_in_stock

    def is_low_stock(self, threshold):
        return self.quantity_in_stock <= threshold

    def stock_status(self, threshold):
        if self.quantity_in_stock == 0:
            return self.STATUS_OUT_OF_STOCK
        if self.is_low_stock(threshold):
            return self.STATUS_LOW_STOCK
        return self.STATUS_AVAILABLE

    def price_for_size(self, size=None):
        """Size-specific price when one is configured, else the product price."""
        if size is None:
            return self.price
        size_price = self.size_prices.filter(size=size).first()
        return size_price.price if size_price else self.price


class ProductSizePrice(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='size_prices')
    size = models.ForeignKey(Size, on_delete=models.CASCADE, related_name='product_prices')
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['product', 'size'], name='uniq_product_size_price'),
        ]

    def __str__(self):
        return f"{self.product.name} / {self.size.name}: {self.price}"


class StockEntry(models.Model):
    """Audit trail of every change to Product.quantity_in_stock."""

    ENTRY_INITIAL = 'initial'
    ENTRY_SALE = 'sale'
    ENTRY_CANCELLATION = 'cancellation'
    ENTRY_ADJUSTMENT = 'adjustment'

    ENTRY_TYPE_CHOICES = [
        (ENTRY_INITIAL, 'Initial Stock'),
        (ENTRY_SALE, 'Sale'),
        (ENTRY_CANCELLATION, 'Sale Cancellation'),
        (ENTRY_ADJUSTMENT, 'Adjustment'),
    ]

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='stock_entries')
    entry_type = models.CharField(max_length=20, choices=ENTRY_TYPE_CHOICES)
    quantity = models.IntegerField(help_text='Signed change applied to the stock level')
    stock_before = models.PositiveIntegerField()
    stock_after = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    reference_id = models.CharField(max_length=64, blank=True)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='stock_entries',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name_plural = 'Stock entries'

    def __str__(self):
        return f"{self.get_entry_type_display()} {self.quantity:+d} - {self.product.name}"

    @property
    def is_stock_in(self):
        return self.quantity > 0

    @property
    def is_stock_out(self):
        return self.quantity < 0

    @property
    def absolute_quantity(self):
        return abs(self.quantity)
