from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils import timezone

from .pricing import DISCOUNT_FIXED, DISCOUNT_PERCENTAGE, line_total


class Invoice(models.Model):
    """
    A completed sale.

    Totals are stored as computed at sale time; the items below are a
    snapshot and are never re-priced.
    """

    DISCOUNT_TYPE_CHOICES = [
        (DISCOUNT_FIXED, 'Fixed amount'),
        (DISCOUNT_PERCENTAGE, 'Percentage'),
    ]

    PAYMENT_DONE = 'done'
    PAYMENT_PENDING = 'pending'
    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_DONE, 'Done'),
        (PAYMENT_PENDING, 'Pending'),
    ]

    invoice_number = models.CharField(max_length=40, unique=True, editable=False)
    customer_name = models.CharField(max_length=120, blank=True)
    customer_phone = models.CharField(max_length=32, blank=True)

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    tax_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))],
    )
    tax_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    discount_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text='Money taken off the invoice (already converted from a percentage)',
    )
    discount_type = models.CharField(max_length=20, choices=DISCOUNT_TYPE_CHOICES, default=DISCOUNT_PERCENTAGE)
    grand_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))

    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_DONE)
    expected_payment_date = models.DateField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invoices',
    )
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['payment_status', 'created_at'], name='idx_invoice_status_date'),
        ]

    def __str__(self):
        return f"{self.invoice_number} - {self.customer_name or 'Walk-in'}"

    def save(self, *args, **kwargs):
        if not self.invoice_number:
            self.invoice_number = self.generate_invoice_number()
        if self.payment_status != self.PAYMENT_PENDING:
            self.expected_payment_date = None
        super().save(*args, **kwargs)

    @classmethod
    def generate_invoice_number(cls, day=None):
        """PREFIX-YYYYMMDD-NNNN, numbered per day."""
        day = day or timezone.localdate()
        prefix = settings.STORE_CONFIG.get('INVOICE_PREFIX', 'INV')
        stem = f"{prefix}-{day:%Y%m%d}-"

        # Sequences can run past four digits.
        numbers = cls.objects.filter(invoice_number__startswith=stem).values_list('invoice_number', flat=True)
        sequence = max((int(number[len(stem):]) for number in numbers), default=0) + 1
        return f"{stem}{sequence:04d}"

    @property
    def is_pending(self):
        return self.payment_status == self.PAYMENT_PENDING

    @property
    def item_count(self):
        return self.items.count()


class InvoiceItem(models.Model):
    """One invoice line, denormalized so it survives product edits and deletes."""

    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(
        'inventory.Product',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='invoice_items',
    )
    product_name = models.CharField(max_length=200)
    size_name = models.CharField(max_length=40, blank=True)
    color_name = models.CharField(max_length=60, blank=True)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))],
    )
    total_price = models.DecimalField(max_digits=14, decimal_places=2)
    # units actually taken from stock; lower than quantity when the sale was clamped
    stock_deducted = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"

    def save(self, *args, **kwargs):
        self.total_price = line_total(self.quantity, self.unit_price)
        super().save(*args, **kwargs)

    @property
    def restorable_quantity(self):
        """Units a cancellation gives back to stock."""
        if self.stock_deducted is None:
            return self.quantity
        return self.stock_deducted
