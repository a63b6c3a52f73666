import logging

from django.db.models import Q
from rest_framework import status, viewsets
from rest_framework.decorators import api_view
from rest_framework.response import Response

from .models import Category, Size, Color, Product, ProductSizePrice, StockEntry
from .serializers import (
    CategorySerializer,
    SizeSerializer,
    ColorSerializer,
    ProductSerializer,
    ProductSizePriceSerializer,
    StockEntrySerializer,
)
from .stock import current_threshold, inventory_summary, low_stock_products

logger = logging.getLogger(__name__)


# ====================================
# REST API VIEWSETS
# ====================================

class CategoryViewSet(viewsets.ModelViewSet):
    """API endpoint for categories"""
    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    search_fields = ['name']

    def destroy(self, request, *args, **kwargs):
        category = self.get_object()

        # Refuse to orphan products silently
        if category.products.exists():
            return Response({
                'success': False,
                'message': f'Cannot delete category. It has {category.products.count()} products.'
            }, status=status.HTTP_400_BAD_REQUEST)

        logger.info(f"Category deleted: {category.name}")
        return super().destroy(request, *args, **kwargs)


class SizeViewSet(viewsets.ModelViewSet):
    """API endpoint for sizes, in display order"""
    queryset = Size.objects.all()
    serializer_class = SizeSerializer
    pagination_class = None


class ColorViewSet(viewsets.ModelViewSet):
    """API endpoint for colors, in display order"""
    queryset = Color.objects.all()
    serializer_class = ColorSerializer
    pagination_class = None


class ProductViewSet(viewsets.ModelViewSet):
    """API endpoint for products"""
    serializer_class = ProductSerializer

    def get_queryset(self):
        """Filter products based on query parameters"""
        queryset = Product.objects.select_related('category').prefetch_related(
            'sizes', 'colors', 'size_prices__size'
        )

        # Filter by category
        category_id = self.request.query_params.get('category')
        if category_id:
            queryset = queryset.filter(category_id=category_id)

        # Only products at or below the low stock threshold
        if self.request.query_params.get('low_stock') in ('1', 'true', 'True'):
            queryset = queryset.filter(quantity_in_stock__lte=current_threshold())

        # Search by name or SKU
        search = self.request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) |
                Q(sku__icontains=search)
            )

        return queryset

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context['low_stock_threshold'] = current_threshold()
        return context

    def perform_destroy(self, instance):
        logger.info(f"Deleting product #{instance.pk} - {instance.name} (user: {self.request.user.username})")
        instance.delete()


class ProductSizePriceViewSet(viewsets.ModelViewSet):
    """API endpoint for size-specific product prices"""
    serializer_class = ProductSizePriceSerializer

    def get_queryset(self):
        queryset = ProductSizePrice.objects.select_related('product', 'size')
        product_id = self.request.query_params.get('product')
        if product_id:
            queryset = queryset.filter(product_id=product_id)
        return queryset


class StockEntryViewSet(viewsets.ReadOnlyModelViewSet):
    """API endpoint for the stock movement ledger"""
    serializer_class = StockEntrySerializer

    def get_queryset(self):
        """Filter stock entries by product, entry type or reference"""
        queryset = StockEntry.objects.select_related('product', 'created_by')

        product_id = self.request.query_params.get('product')
        if product_id:
            queryset = queryset.filter(product_id=product_id)

        entry_type = self.request.query_params.get('entry_type')
        if entry_type:
            queryset = queryset.filter(entry_type=entry_type)

        reference_id = self.request.query_params.get('reference')
        if reference_id:
            queryset = queryset.filter(reference_id=reference_id)

        return queryset


# ====================================
# DASHBOARD VIEWS
# ====================================

def _parse_threshold(request):
    raw = request.query_params.get('threshold')
    if raw in (None, ''):
        return None
    threshold = int(raw)
    if threshold < 0:
        raise ValueError("Threshold cannot be negative")
    return threshold


@api_view(['GET'])
def low_stock(request):
    """Products at or below the low stock threshold (lowest stock first)"""
    try:
        threshold = current_threshold(_parse_threshold(request))
    except ValueError:
        return Response({
            'success': False,
            'message': 'Threshold must be a non-negative whole number'
        }, status=status.HTTP_400_BAD_REQUEST)

    products = low_stock_products(threshold=threshold)
    serializer = ProductSerializer(
        products,
        many=True,
        context={'request': request, 'low_stock_threshold': threshold},
    )
    return Response({
        'threshold': threshold,
        'count': len(products),
        'products': serializer.data,
    })


@api_view(['GET'])
def dashboard_stats(request):
    """Get inventory statistics for dashboard"""
    summary = inventory_summary()
    summary['inventory_value'] = float(summary['inventory_value'])
    return Response(summary)
