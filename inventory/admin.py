from django.contrib import admin
from django.utils.html import format_html
from django.urls import reverse
from decimal import Decimal
from django.http import HttpResponse
import csv

from store.models import StoreSettings
from .forms import ProductForm, ColorForm
from .models import Category, Size, Color, Product, ProductSizePrice, StockEntry
from .stock import editable_fields, record_entry, set_stock

# ============================================
# CUSTOM ACTIONS
# ============================================

def export_to_csv(modeladmin, request, queryset):
    """Export selected items to CSV"""
    opts = modeladmin.model._meta
    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename={opts.verbose_name_plural}.csv'

    writer = csv.writer(response)
    fields = [field for field in opts.get_fields() if not field.many_to_many and not field.one_to_many]

    writer.writerow([field.verbose_name for field in fields])
    for obj in queryset:
        writer.writerow([getattr(obj, field.name) for field in fields])

    return response
export_to_csv.short_description = "Export to CSV"


def _money(value):
    symbol = StoreSettings.load().currency_symbol
    return '{}{:,.2f}'.format(symbol, float(Decimal(value or 0)))


# ============================================
# INLINE ADMINS
# ============================================

class StockEntryInline(admin.TabularInline):
    model = StockEntry
    extra = 0
    can_delete = False
    fields = [
        'entry_type',
        'quantity',
        'stock_before',
        'stock_after',
        'reference_id',
        'created_by',
        'created_at',
    ]
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


class ProductSizePriceInline(admin.TabularInline):
    model = ProductSizePrice
    extra = 0
    fields = ['size', 'price']


# ============================================
# LOOKUP ADMINS
# ============================================

@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'product_count', 'created_at']
    search_fields = ['name']
    actions = [export_to_csv]

    def product_count(self, obj):
        count = obj.products.count()
        url = reverse('admin:inventory_product_changelist') + f'?category__id__exact={obj.id}'
        return format_html('<a href="{}">{} products</a>', url, count)
    product_count.short_description = 'Products'


@admin.register(Size)
class SizeAdmin(admin.ModelAdmin):
    list_display = ['name', 'sort_order', 'created_at']
    list_editable = ['sort_order']
    search_fields = ['name']


@admin.register(Color)
class ColorAdmin(admin.ModelAdmin):
    form = ColorForm
    list_display = ['name', 'swatch', 'hex_code', 'sort_order']
    list_editable = ['sort_order']
    search_fields = ['name', 'hex_code']

    def swatch(self, obj):
        if not obj.hex_code:
            return '-'
        return format_html(
            '<span style="display: inline-block; width: 18px; height: 18px; '
            'border: 1px solid #dee2e6; border-radius: 3px; background-color: {};"></span>',
            obj.hex_code,
        )
    swatch.short_description = 'Color'


# ============================================
# PRODUCT ADMIN
# ============================================

@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    form = ProductForm
    list_display = [
        'name',
        'sku',
        'category_link',
        'quantity_display',
        'pricing_info',
        'profit_display',
        'updated_at',
    ]
    list_filter = ['category', 'sizes', 'colors', 'created_at']
    search_fields = ['name', 'sku']
    readonly_fields = ['created_at', 'updated_at', 'profit_margin']

    fieldsets = (
        ('Basic Information', {'fields': ('name', 'sku', 'category', 'description')}),
        ('Variants', {'fields': ('sizes', 'colors')}),
        ('Inventory', {'fields': ('quantity_in_stock',)}),
        ('Pricing', {'fields': ('price', 'cost', 'profit_margin')}),
        ('Timestamps', {'fields': ('created_at', 'updated_at'), 'classes': ('collapse',)}),
    )

    inlines = [ProductSizePriceInline, StockEntryInline]
    actions = [export_to_csv]
    date_hierarchy = 'created_at'
    list_per_page = 50

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('category')

    def save_model(self, request, obj, form, change):
        if not change:
            super().save_model(request, obj, form, change)
            if obj.quantity_in_stock > 0:
                record_entry(
                    obj,
                    StockEntry.ENTRY_INITIAL,
                    0,
                    obj.quantity_in_stock,
                    unit_price=obj.cost,
                    user=request.user,
                    notes="Initial stock entry via admin",
                )
            return

        # The stock column is only written when the editor changed it.
        obj.save(update_fields=editable_fields(obj))
        if 'quantity_in_stock' in form.changed_data:
            set_stock(obj, obj.quantity_in_stock, unit_price=obj.cost, user=request.user, notes="Admin edit")
        else:
            obj.refresh_from_db(fields=['quantity_in_stock'])

    def category_link(self, obj):
        if obj.category:
            url = reverse('admin:inventory_category_change', args=[obj.category.id])
            return format_html('<a href="{}">{}</a>', url, obj.category.name)
        return '-'
    category_link.short_description = 'Category'
    category_link.admin_order_field = 'category__name'

    def quantity_display(self, obj):
        threshold = StoreSettings.load().low_stock_threshold
        colors = {
            Product.STATUS_AVAILABLE: '#28a745',
            Product.STATUS_LOW_STOCK: '#ffc107',
            Product.STATUS_OUT_OF_STOCK: '#dc3545',
        }
        color = colors[obj.stock_status(threshold)]
        return format_html('<span style="color: {}; font-weight: bold;">{}</span>', color, obj.quantity_in_stock)
    quantity_display.short_description = 'Stock'
    quantity_display.admin_order_field = 'quantity_in_stock'

    def pricing_info(self, obj):
        return format_html(
            'Cost: <strong>{}</strong><br>Price: <strong>{}</strong>',
            _money(obj.cost) if obj.cost is not None else '-',
            _money(obj.price),
        )
    pricing_info.short_description = 'Pricing'

    def profit_display(self, obj):
        if obj.cost is None:
            return '-'
        margin = obj.profit_margin
        color = '#28a745' if margin > 0 else '#dc3545'
        return format_html('<span style="color: {};">{}</span>', color, _money(margin))
    profit_display.short_description = 'Profit / unit'


# ============================================
# STOCK ENTRY ADMIN
# ============================================

@admin.register(StockEntry)
class StockEntryAdmin(admin.ModelAdmin):
    list_display = [
        'id',
        'product_link',
        'entry_type_badge',
        'quantity_display',
        'stock_before',
        'stock_after',
        'reference_id',
        'created_by',
        'created_at',
    ]
    list_filter = ['entry_type', 'created_at', 'product__category']
    search_fields = ['product__name', 'product__sku', 'reference_id', 'notes', 'created_by__username']
    date_hierarchy = 'created_at'
    list_per_page = 100
    actions = [export_to_csv]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('product', 'created_by')

    def product_link(self, obj):
        url = reverse('admin:inventory_product_change', args=[obj.product_id])
        return format_html('<a href="{}">{}</a>', url, obj.product.name)
    product_link.short_description = 'Product'
    product_link.admin_order_field = 'product__name'

    def entry_type_badge(self, obj):
        colors = {
            StockEntry.ENTRY_INITIAL: '#17a2b8',
            StockEntry.ENTRY_SALE: '#dc3545',
            StockEntry.ENTRY_CANCELLATION: '#28a745',
            StockEntry.ENTRY_ADJUSTMENT: '#ffc107',
        }
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 10px; border-radius: 3px; font-size: 11px;">{}</span>',
            colors.get(obj.entry_type, '#6c757d'),
            obj.get_entry_type_display().upper(),
        )
    entry_type_badge.short_description = 'Type'
    entry_type_badge.admin_order_field = 'entry_type'

    def quantity_display(self, obj):
        color = '#28a745' if obj.is_stock_in else '#dc3545'
        return format_html('<span style="color: {}; font-weight: bold;">{}</span>', color, f"{obj.quantity:+d}")
    quantity_display.short_description = 'Change'
    quantity_display.admin_order_field = 'quantity'
