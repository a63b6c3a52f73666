from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

# REST API Router
router = DefaultRouter()
router.register(r'invoices', views.InvoiceViewSet, basename='invoice')

app_name = 'invoices'

urlpatterns = [
    path('', include(router.urls)),

    # Reports
    path('reports/overview/', views.sales_overview, name='report-overview'),
    path('reports/product-sales/', views.product_sales, name='report-product-sales'),
    path('reports/trending/', views.trending, name='report-trending'),
    path('reports/profits/', views.profits, name='report-profits'),
    path('reports/monthly-sales/', views.monthly_sales, name='report-monthly-sales'),
    path('reports/monthly-profit/', views.monthly_profit, name='report-monthly-profit'),
    path('reports/dashboard/', views.dashboard, name='report-dashboard'),
]
