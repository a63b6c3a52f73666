from rest_framework import serializers

from .models import StoreSettings


class StoreSettingsSerializer(serializers.ModelSerializer):
    """Serializer for the store settings singleton"""

    class Meta:
        model = StoreSettings
        fields = [
            'id',
            'store_name',
            'address',
            'phone',
            'email',
            'currency_symbol',
            'tax_percentage',
            'low_stock_threshold',
            'whatsapp_channel',
            'instagram_page',
            'whatsapp_tagline',
            'instagram_tagline',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_store_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Store name is required')
        return value

    def validate_currency_symbol(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Currency symbol is required')
        return value
