from django.db.models import Q
from django.utils import timezone
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action, api_view
from rest_framework.response import Response

from .exceptions import InvoiceError
from .models import Invoice
from .serializers import (
    InvoiceSerializer,
    InvoiceCreateSerializer,
    DraftInvoiceSerializer,
    PaymentStatusSerializer,
    QuoteSerializer,
    DateRangeSerializer,
    DashboardPeriodSerializer,
)
from . import reports, services


def _error(message, status_code=status.HTTP_400_BAD_REQUEST):
    return Response({'success': False, 'message': message}, status=status_code)


def _request_user(request):
    return request.user if request.user.is_authenticated else None


# ====================================
# INVOICES
# ====================================

class InvoiceViewSet(mixins.ListModelMixin,
                     mixins.RetrieveModelMixin,
                     mixins.DestroyModelMixin,
                     viewsets.GenericViewSet):
    """
    Invoices are created through the sale workflow and never edited in
    place; deleting one cancels the sale and puts the stock back.
    """
    serializer_class = InvoiceSerializer
    search_fields = ['invoice_number', 'customer_name', 'customer_phone']
    ordering_fields = ['created_at', 'grand_total']

    def get_queryset(self):
        queryset = (
            Invoice.objects.select_related('created_by')
            .prefetch_related('items')
        )

        payment_status = self.request.query_params.get('payment_status')
        if payment_status:
            queryset = queryset.filter(payment_status=payment_status)

        customer = self.request.query_params.get('customer')
        if customer:
            queryset = queryset.filter(
                Q(customer_name__icontains=customer) |
                Q(customer_phone__icontains=customer)
            )

        date_from = self.request.query_params.get('date_from')
        if date_from:
            queryset = queryset.filter(created_at__date__gte=date_from)

        date_to = self.request.query_params.get('date_to')
        if date_to:
            queryset = queryset.filter(created_at__date__lte=date_to)

        return queryset

    def create(self, request, *args, **kwargs):
        serializer = InvoiceCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            invoice = services.create_invoice(
                items=data['items'],
                customer_name=data['customer_name'],
                customer_phone=data['customer_phone'],
                discount_amount=data['discount_amount'],
                discount_type=data['discount_type'],
                tax_percentage=data['tax_percentage'],
                payment_status=data['payment_status'],
                expected_payment_date=data['expected_payment_date'],
                user=_request_user(request),
            )
        except InvoiceError as e:
            return _error(e.message)
        except Exception:
            return _error('Could not save the invoice', status.HTTP_500_INTERNAL_SERVER_ERROR)

        invoice = self.get_queryset().get(pk=invoice.pk)
        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        invoice = self.get_object()
        try:
            summary = services.cancel_invoice(invoice, user=_request_user(request))
        except Exception:
            return _error('Could not cancel the invoice', status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({
            'success': True,
            'message': f"Invoice {summary['invoice_number']} cancelled",
            **summary,
        })

    @action(detail=True, methods=['post', 'patch'], url_path='payment-status')
    def payment_status(self, request, pk=None):
        invoice = self.get_object()
        serializer = PaymentStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            services.update_payment_status(
                invoice,
                serializer.validated_data['payment_status'],
                serializer.validated_data['expected_payment_date'],
                user=_request_user(request),
            )
        except InvoiceError as e:
            return _error(e.message)

        return Response(InvoiceSerializer(invoice).data)

    @action(detail=False, methods=['post'])
    def quote(self, request):
        """Price a draft invoice without saving it."""
        serializer = DraftInvoiceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            result = services.quote(
                data['items'],
                discount_amount=data['discount_amount'],
                discount_type=data['discount_type'],
                tax_percentage=data['tax_percentage'],
            )
        except InvoiceError as e:
            return _error(e.message)

        return Response(QuoteSerializer(result).data)


# ====================================
# REPORTS
# ====================================

def _requested_range(request):
    """Resolve ?range=day|month|year&date=... or ?start=...&end=... (end date inclusive)."""
    serializer = DateRangeSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    params = serializer.validated_data

    if 'start' in params:
        return reports.day_range(params['start'])[0], reports.day_range(params['end'])[1]

    day = params['date'] or timezone.localdate()
    if params['range'] == 'month':
        return reports.month_range(day)
    if params['range'] == 'year':
        return reports.year_range(day.year)
    return reports.day_range(day)


def _requested_day(request):
    serializer = DateRangeSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data['date'] or timezone.localdate()


def _requested_year(request):
    year = request.query_params.get('year')
    if not year:
        return timezone.localdate().year
    year = int(year)
    if not 1 <= year < 9999:
        raise ValueError(year)
    return year


def _money_rows(rows, *fields):
    return [
        {key: (str(value) if key in fields else value) for key, value in row.items()}
        for row in rows
    ]


@api_view(['GET'])
def sales_overview(request):
    """Settled sales today, month to date and year to date"""
    overview = reports.sales_overview(_requested_day(request))
    return Response({
        'date': overview['date'],
        'today': str(overview['today']),
        'month_to_date': str(overview['month_to_date']),
        'year_to_date': str(overview['year_to_date']),
    })


@api_view(['GET'])
def product_sales(request):
    """Quantity and revenue per product for one day"""
    day = _requested_day(request)
    rows = reports.product_sales(day)
    return Response({
        'date': day,
        'products': _money_rows(rows, 'revenue'),
    })


@api_view(['GET'])
def trending(request):
    """Best sellers by quantity over a day, month, year or explicit range"""
    start, end = _requested_range(request)
    limit = request.query_params.get('limit')
    try:
        limit = int(limit) if limit else None
    except ValueError:
        return _error('limit must be a whole number')
    if limit is not None and limit < 1:
        return _error('limit must be at least 1')

    rows = reports.trending_products(start, end, limit=limit)
    return Response({
        'start': start,
        'end': end,
        'products': _money_rows(rows, 'total_revenue', 'average_price'),
    })


@api_view(['GET'])
def profits(request):
    """Revenue, cost and profit overall and per product"""
    start, end = _requested_range(request)
    breakdown = reports.profit_breakdown(start, end)
    return Response({
        'start': start,
        'end': end,
        'total_revenue': str(breakdown['total_revenue']),
        'total_cost': str(breakdown['total_cost']),
        'total_profit': str(breakdown['total_profit']),
        'products': _money_rows(
            breakdown['products'],
            'total_revenue', 'total_cost', 'total_profit',
            'average_price', 'average_cost', 'average_profit',
        ),
    })


@api_view(['GET'])
def monthly_sales(request):
    """Invoice totals per month of a year"""
    try:
        year = _requested_year(request)
    except ValueError:
        return _error('year must be a valid year')

    result = reports.monthly_sales(year)
    return Response({'year': result['year'], 'months': _money_rows(result['months'], 'sales')})


@api_view(['GET'])
def monthly_profit(request):
    """Revenue, cost and profit per month of a year"""
    try:
        year = _requested_year(request)
    except ValueError:
        return _error('year must be a valid year')

    result = reports.monthly_profit(year)
    return Response({
        'year': result['year'],
        'months': _money_rows(result['months'], 'revenue', 'cost', 'profit'),
    })


@api_view(['GET'])
def dashboard(request):
    """Headline numbers for today, the last week or the last month"""
    serializer = DashboardPeriodSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)

    stats = reports.dashboard_stats(serializer.validated_data['period'])
    stats['total_revenue'] = str(stats['total_revenue'])
    stats['revenue_by_day'] = _money_rows(stats['revenue_by_day'], 'revenue')
    return Response(stats)
