from rest_framework import serializers

from store.models import StoreSettings
from .models import Category, Size, Color, Product, ProductSizePrice, StockEntry
from .stock import editable_fields, record_entry, set_stock


class CategorySerializer(serializers.ModelSerializer):
    """Serializer for Category model"""

    product_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ['id', 'name', 'description', 'product_count', 'created_at']
        read_only_fields = ['id', 'created_at']

    def get_product_count(self, obj):
        return obj.products.count()

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Name is required')
        return value


class SizeSerializer(serializers.ModelSerializer):

    class Meta:
        model = Size
        fields = ['id', 'name', 'sort_order', 'created_at']
        read_only_fields = ['id', 'created_at']


class ColorSerializer(serializers.ModelSerializer):

    class Meta:
        model = Color
        fields = ['id', 'name', 'hex_code', 'sort_order', 'created_at']
        read_only_fields = ['id', 'created_at']

    def validate_hex_code(self, value):
        return value.upper() if value else value


class ProductSizePriceSerializer(serializers.ModelSerializer):
    size_name = serializers.CharField(source='size.name', read_only=True)

    class Meta:
        model = ProductSizePrice
        fields = ['id', 'product', 'size', 'size_name', 'price']
        read_only_fields = ['id']

    def validate(self, data):
        product = data.get('product', getattr(self.instance, 'product', None))
        size = data.get('size', getattr(self.instance, 'size', None))
        if product and size and not product.sizes.filter(pk=size.pk).exists():
            raise serializers.ValidationError({
                'size': f'{size.name} is not one of the sizes of {product.name}'
            })
        return data


class ProductSerializer(serializers.ModelSerializer):
    """Full serializer for product details"""

    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    sizes = serializers.PrimaryKeyRelatedField(queryset=Size.objects.all(), many=True, required=False)
    colors = serializers.PrimaryKeyRelatedField(queryset=Color.objects.all(), many=True, required=False)
    size_prices = ProductSizePriceSerializer(many=True, read_only=True)
    profit_margin = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    stock_status = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            'id',
            'name',
            'sku',
            'description',
            'category',
            'category_name',
            'sizes',
            'colors',
            'size_prices',
            'price',
            'cost',
            'profit_margin',
            'quantity_in_stock',
            'stock_status',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def get_stock_status(self, obj):
        threshold = self.context.get('low_stock_threshold')
        if threshold is None:
            threshold = StoreSettings.load().low_stock_threshold
            self.context['low_stock_threshold'] = threshold
        return obj.stock_status(threshold)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Name is required')
        return value

    def validate_sku(self, value):
        value = (value or '').strip()
        if not value:
            return None
        duplicates = Product.objects.filter(sku__iexact=value)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError(f"SKU '{value}' already exists")
        return value

    def _request_user(self):
        request = self.context.get('request')
        if request is not None and request.user.is_authenticated:
            return request.user
        return None

    def create(self, validated_data):
        """Create product and record its opening stock"""
        product = super().create(validated_data)

        if product.quantity_in_stock > 0:
            record_entry(
                product,
                StockEntry.ENTRY_INITIAL,
                0,
                product.quantity_in_stock,
                unit_price=product.cost,
                user=self._request_user(),
                notes="Initial stock entry via API",
            )

        return product

    def update(self, instance, validated_data):
        """
        Update catalogue fields without touching the stock column, then
        apply any new stock level under a row lock.
        """
        new_quantity = validated_data.pop('quantity_in_stock', None)
        m2m = {
            name: validated_data.pop(name)
            for name in ('sizes', 'colors')
            if name in validated_data
        }

        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save(update_fields=editable_fields(instance))

        for name, value in m2m.items():
            getattr(instance, name).set(value)

        if new_quantity is not None:
            set_stock(
                instance,
                new_quantity,
                unit_price=instance.cost,
                user=self._request_user(),
                notes="Manual adjustment",
            )
        else:
            instance.refresh_from_db(fields=['quantity_in_stock'])

        return instance


class StockEntrySerializer(serializers.ModelSerializer):
    """Serializer for stock entries (read-only ledger)"""

    product_name = serializers.CharField(source='product.name', read_only=True)
    entry_type_display = serializers.CharField(source='get_entry_type_display', read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)
    is_stock_in = serializers.BooleanField(read_only=True)
    is_stock_out = serializers.BooleanField(read_only=True)
    absolute_quantity = serializers.IntegerField(read_only=True)

    class Meta:
        model = StockEntry
        fields = [
            'id',
            'product',
            'product_name',
            'entry_type',
            'entry_type_display',
            'quantity',
            'absolute_quantity',
            'stock_before',
            'stock_after',
            'unit_price',
            'total_amount',
            'reference_id',
            'notes',
            'created_by',
            'created_by_username',
            'created_at',
            'is_stock_in',
            'is_stock_out',
        ]
        read_only_fields = fields
