from django.contrib import admin

from .models import StoreSettings


@admin.register(StoreSettings)
class StoreSettingsAdmin(admin.ModelAdmin):
    list_display = ['store_name', 'currency_symbol', 'tax_percentage', 'low_stock_threshold', 'updated_at']
    readonly_fields = ['created_at', 'updated_at']
    fieldsets = (
        ('Store', {'fields': ('store_name', 'address', 'phone', 'email')}),
        ('Billing', {'fields': ('currency_symbol', 'tax_percentage', 'low_stock_threshold')}),
        ('Social Media', {
            'fields': ('whatsapp_channel', 'whatsapp_tagline', 'instagram_page', 'instagram_tagline'),
            'classes': ('collapse',),
        }),
        ('Timestamps', {'fields': ('created_at', 'updated_at'), 'classes': ('collapse',)}),
    )

    def has_add_permission(self, request):
        # singleton
        return not StoreSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False
