from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

# REST API Router
router = DefaultRouter()
router.register(r'categories', views.CategoryViewSet, basename='category')
router.register(r'sizes', views.SizeViewSet, basename='size')
router.register(r'colors', views.ColorViewSet, basename='color')
router.register(r'products', views.ProductViewSet, basename='product')
router.register(r'size-prices', views.ProductSizePriceViewSet, basename='sizeprice')
router.register(r'stock-entries', views.StockEntryViewSet, basename='stockentry')

app_name = 'inventory'

urlpatterns = [
    path('', include(router.urls)),
    path('low-stock/', views.low_stock, name='low-stock'),
    path('dashboard-stats/', views.dashboard_stats, name='dashboard-stats'),
]
