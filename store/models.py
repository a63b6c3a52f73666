from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models


def _store_default(key):
    return settings.STORE_CONFIG[key]


class StoreSettings(models.Model):
    """
    Singleton configuration row for the store.

    Always access it through StoreSettings.load(), which creates the row
    with defaults from settings.STORE_CONFIG the first time.
    """

    store_name = models.CharField(max_length=200)
    address = models.TextField(blank=True)
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    currency_symbol = models.CharField(max_length=8, default='₹')
    tax_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))],
    )
    low_stock_threshold = models.PositiveIntegerField(default=10)

    whatsapp_channel = models.URLField(blank=True)
    instagram_page = models.URLField(blank=True)
    whatsapp_tagline = models.CharField(max_length=200, blank=True)
    instagram_tagline = models.CharField(max_length=200, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Store settings'
        verbose_name_plural = 'Store settings'

    def __str__(self):
        return self.store_name

    def save(self, *args, **kwargs):
        # only one row may exist
        if not self.pk:
            existing = StoreSettings.objects.only('pk', 'created_at').first()
            if existing:
                self.pk = existing.pk
                self.created_at = existing.created_at
                self._state.adding = False
        super().save(*args, **kwargs)

    @classmethod
    def load(cls):
        instance = cls.objects.first()
        if instance is None:
            instance = cls.objects.create(
                store_name=_store_default('DEFAULT_STORE_NAME'),
                currency_symbol=_store_default('DEFAULT_CURRENCY_SYMBOL'),
                tax_percentage=Decimal(str(_store_default('DEFAULT_TAX_PERCENTAGE'))),
                low_stock_threshold=_store_default('DEFAULT_LOW_STOCK_THRESHOLD'),
            )
        return instance
