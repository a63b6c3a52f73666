from django.contrib import admin, messages
from django.utils.html import format_html
from django.urls import reverse
from django.db import transaction

from store.models import StoreSettings
from .forms import InvoiceAdminForm
from .models import Invoice, InvoiceItem
from .services import cancel_invoice


def _money(value):
    return '{}{:,.2f}'.format(StoreSettings.load().currency_symbol, float(value or 0))


# ============================================
# INLINE ADMIN FOR INVOICE ITEMS
# ============================================

class InvoiceItemInline(admin.TabularInline):
    """Items are a snapshot of the sale and cannot be edited."""
    model = InvoiceItem
    extra = 0
    can_delete = False

    fields = [
        'product',
        'product_name',
        'size_name',
        'color_name',
        'quantity',
        'unit_price',
        'total_price',
        'stock_deducted',
    ]
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


# ============================================
# MAIN INVOICE ADMIN
# ============================================

@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    form = InvoiceAdminForm
    inlines = [InvoiceItemInline]

    list_display = [
        'invoice_number',
        'customer_display',
        'item_count_display',
        'grand_total_display',
        'payment_status_badge',
        'expected_payment_date',
        'created_by',
        'created_at',
    ]

    list_filter = [
        'payment_status',
        'discount_type',
        'created_at',
        'created_by',
    ]

    search_fields = [
        'invoice_number',
        'customer_name',
        'customer_phone',
        'items__product_name',
    ]

    readonly_fields = [
        'invoice_number',
        'subtotal',
        'tax_percentage',
        'tax_amount',
        'discount_type',
        'discount_amount',
        'grand_total',
        'created_by',
        'created_at',
        'updated_at',
    ]

    fieldsets = (
        ('Invoice', {
            'fields': (
                'invoice_number',
                'customer_name',
                'customer_phone',
                'created_by',
                'created_at',
            )
        }),
        ('Totals', {
            'fields': (
                'subtotal',
                'tax_percentage',
                'tax_amount',
                'discount_type',
                'discount_amount',
                'grand_total',
            ),
            'description': 'Calculated when the invoice was created'
        }),
        ('Payment', {
            'fields': (
                'payment_status',
                'expected_payment_date',
            )
        }),
    )

    date_hierarchy = 'created_at'
    list_per_page = 50

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('created_by').prefetch_related('items')

    def has_add_permission(self, request):
        # Invoices are created through the sale workflow so stock is deducted
        return False

    def delete_model(self, request, obj):
        """Deleting an invoice cancels the sale and restores stock."""
        summary = cancel_invoice(obj, user=request.user)
        self.message_user(
            request,
            f"Invoice {summary['invoice_number']} cancelled. "
            f"(Items: {summary['items']}, Units restored: {summary['units_restored']})",
            messages.SUCCESS
        )

    def delete_queryset(self, request, queryset):
        """Handle bulk cancellation"""
        cancelled = 0
        restored = 0

        with transaction.atomic():
            for invoice in queryset:
                summary = cancel_invoice(invoice, user=request.user)
                cancelled += 1
                restored += summary['units_restored']

        self.message_user(
            request,
            f"Successfully cancelled {cancelled} invoice(s); {restored} unit(s) returned to stock.",
            messages.SUCCESS
        )

    def customer_display(self, obj):
        if not obj.customer_name:
            return 'Walk-in'
        if obj.customer_phone:
            return format_html('{}<br><small>{}</small>', obj.customer_name, obj.customer_phone)
        return obj.customer_name
    customer_display.short_description = 'Customer'
    customer_display.admin_order_field = 'customer_name'

    def item_count_display(self, obj):
        count = len(obj.items.all())
        return format_html('<strong>{}</strong> item{}', count, '' if count == 1 else 's')
    item_count_display.short_description = 'Items'

    def grand_total_display(self, obj):
        return format_html('<strong>{}</strong>', _money(obj.grand_total))
    grand_total_display.short_description = 'Grand Total'
    grand_total_display.admin_order_field = 'grand_total'

    def payment_status_badge(self, obj):
        colors = {
            Invoice.PAYMENT_DONE: '#28a745',
            Invoice.PAYMENT_PENDING: '#ffc107',
        }
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 10px; border-radius: 3px; font-size: 11px;">{}</span>',
            colors.get(obj.payment_status, '#6c757d'),
            obj.get_payment_status_display().upper(),
        )
    payment_status_badge.short_description = 'Payment'
    payment_status_badge.admin_order_field = 'payment_status'


# ============================================
# INVOICE ITEM ADMIN (READ-ONLY)
# ============================================

@admin.register(InvoiceItem)
class InvoiceItemAdmin(admin.ModelAdmin):
    list_display = [
        'id',
        'invoice_link',
        'product_name',
        'size_name',
        'color_name',
        'quantity',
        'unit_price_display',
        'total_price_display',
        'stock_deducted',
    ]
    list_filter = ['invoice__created_at', 'size_name']
    search_fields = ['product_name', 'invoice__invoice_number']
    list_per_page = 100

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('invoice', 'product')

    def invoice_link(self, obj):
        url = reverse('admin:invoices_invoice_change', args=[obj.invoice_id])
        return format_html('<a href="{}">{}</a>', url, obj.invoice.invoice_number)
    invoice_link.short_description = 'Invoice'
    invoice_link.admin_order_field = 'invoice__invoice_number'

    def unit_price_display(self, obj):
        return _money(obj.unit_price)
    unit_price_display.short_description = 'Unit Price'

    def total_price_display(self, obj):
        return _money(obj.total_price)
    total_price_display.short_description = 'Total'
