from decimal import Decimal

from rest_framework import serializers

from inventory.models import Product
from .models import Invoice, InvoiceItem
from .pricing import DISCOUNT_TYPES, DISCOUNT_PERCENTAGE
from .reports import PERIODS, PERIOD_TODAY


# ============================================
# OUTPUT
# ============================================

class InvoiceItemSerializer(serializers.ModelSerializer):

    class Meta:
        model = InvoiceItem
        fields = [
            'id',
            'product',
            'product_name',
            'size_name',
            'color_name',
            'quantity',
            'unit_price',
            'total_price',
            'stock_deducted',
        ]
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    """Invoice with its item snapshot (read-only)."""

    items = InvoiceItemSerializer(many=True, read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)
    payment_status_display = serializers.CharField(source='get_payment_status_display', read_only=True)

    class Meta:
        model = Invoice
        fields = [
            'id',
            'invoice_number',
            'customer_name',
            'customer_phone',
            'subtotal',
            'tax_percentage',
            'tax_amount',
            'discount_type',
            'discount_amount',
            'grand_total',
            'payment_status',
            'payment_status_display',
            'expected_payment_date',
            'items',
            'created_by',
            'created_by_username',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


# ============================================
# INPUT
# ============================================

class InvoiceItemInputSerializer(serializers.Serializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all(), required=False, allow_null=True)
    product_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    size_name = serializers.CharField(max_length=40, required=False, allow_blank=True)
    color_name = serializers.CharField(max_length=60, required=False, allow_blank=True)
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0'),
        required=False,
        allow_null=True,
    )

    def validate(self, data):
        if data.get('product') is None and not (data.get('product_name') or '').strip():
            raise serializers.ValidationError('Choose a product or enter a product name')
        return data


class DraftInvoiceSerializer(serializers.Serializer):
    """Fields shared by a saved invoice and a quote."""

    items = InvoiceItemInputSerializer(many=True)
    discount_amount = serializers.DecimalField(
        max_digits=14,
        decimal_places=2,
        min_value=Decimal('0'),
        required=False,
        default=Decimal('0.00'),
    )
    discount_type = serializers.ChoiceField(choices=DISCOUNT_TYPES, required=False, default=DISCOUNT_PERCENTAGE)
    tax_percentage = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal('0'),
        max_value=Decimal('100'),
        required=False,
        allow_null=True,
        default=None,
    )

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError('An invoice needs at least one item')
        return value


class InvoiceCreateSerializer(DraftInvoiceSerializer):
    customer_name = serializers.CharField(max_length=120, required=False, allow_blank=True, default='')
    customer_phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default='')
    payment_status = serializers.ChoiceField(
        choices=Invoice.PAYMENT_STATUS_CHOICES,
        required=False,
        default=Invoice.PAYMENT_DONE,
    )
    expected_payment_date = serializers.DateField(required=False, allow_null=True, default=None)


class PaymentStatusSerializer(serializers.Serializer):
    payment_status = serializers.ChoiceField(choices=Invoice.PAYMENT_STATUS_CHOICES)
    expected_payment_date = serializers.DateField(required=False, allow_null=True, default=None)


class QuoteItemSerializer(serializers.Serializer):
    product = serializers.IntegerField(allow_null=True)
    product_name = serializers.CharField()
    size_name = serializers.CharField(allow_blank=True)
    color_name = serializers.CharField(allow_blank=True)
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_price = serializers.DecimalField(max_digits=14, decimal_places=2)


class QuoteSerializer(serializers.Serializer):
    """Priced draft, as returned by the quote endpoint."""

    items = QuoteItemSerializer(many=True)
    subtotal = serializers.DecimalField(max_digits=14, decimal_places=2)
    tax_percentage = serializers.DecimalField(max_digits=5, decimal_places=2)
    tax_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    discount_type = serializers.CharField()
    discount_amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    grand_total = serializers.DecimalField(max_digits=14, decimal_places=2)


# ============================================
# REPORT PARAMETERS
# ============================================

class DateRangeSerializer(serializers.Serializer):
    """Either an explicit start/end pair or a day/month/year around `date`."""

    RANGE_CHOICES = ['day', 'month', 'year']

    range = serializers.ChoiceField(choices=RANGE_CHOICES, required=False, default='day')
    date = serializers.DateField(required=False, allow_null=True, default=None)
    start = serializers.DateField(required=False)
    end = serializers.DateField(required=False)

    def validate(self, data):
        if ('start' in data) != ('end' in data):
            raise serializers.ValidationError('Give both start and end, or neither')
        if 'start' in data and data['start'] > data['end']:
            raise serializers.ValidationError('start must not be after end')
        return data


class DashboardPeriodSerializer(serializers.Serializer):
    period = serializers.ChoiceField(choices=PERIODS, required=False, default=PERIOD_TODAY)
