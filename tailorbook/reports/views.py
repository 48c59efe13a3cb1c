import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.conf import settings
from django.core.cache import cache
from django.db.models import Sum, Count, DecimalField
from django.utils import timezone
from decimal import Decimal

from tailorbook.core.cache_signals import dashboard_cache_key
from tailorbook.customers.models import Customer
from tailorbook.expenses.models import Expense
from tailorbook.orders.models import Order, Material, OrderStatus
from tailorbook.orders.serializers import OrderListSerializer
from tailorbook.shops.permissions import HasShop
from tailorbook.shops.serializers import ShopSerializer

logger = logging.getLogger('tailorbook.reports')


def _sum(queryset, field):
    return queryset.aggregate(total=Sum(field, output_field=DecimalField()))['total'] or Decimal('0.00')


def _money_totals(orders, materials, expenses):
    revenue = _sum(orders, 'price')
    material_cost = _sum(materials, 'total_cost')
    expense_total = _sum(expenses, 'amount')
    return {
        'revenue': float(revenue),
        'amount_paid': float(_sum(orders, 'amount_paid')),
        'outstanding_balance': float(_sum(orders, 'balance')),
        'material_cost': float(material_cost),
        'expenses': float(expense_total),
        'profit': float(revenue - material_cost - expense_total),
    }


def build_dashboard(shop, request=None):
    """Dashboard payload for one shop"""
    today = timezone.localdate()
    orders = Order.objects.filter(shop=shop)
    materials = Material.objects.filter(order__shop=shop)
    expenses = Expense.objects.filter(shop=shop)

    month_orders = orders.filter(created_at__year=today.year, created_at__month=today.month)
    month_materials = materials.filter(order__in=month_orders)
    month_expenses = expenses.filter(date__year=today.year, date__month=today.month)

    status_counts = {value: 0 for value in OrderStatus.values}
    for row in orders.values('status').annotate(count=Count('id')):
        status_counts[row['status']] = row['count']

    recent_orders = orders.select_related('customer').order_by('-created_at')[:5]

    return {
        'totals': _money_totals(orders, materials, expenses),
        'this_month': _money_totals(month_orders, month_materials, month_expenses),
        'order_status_counts': status_counts,
        'total_orders': orders.count(),
        'total_customers': Customer.objects.filter(shop=shop).count(),
        'recent_orders': OrderListSerializer(recent_orders, many=True, context={'request': request}).data,
        'shop': ShopSerializer(shop, context={'request': request}).data,
        'generated_at': timezone.now().isoformat(),
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasShop])
def dashboard(request):
    """Shop dashboard: money totals, this month's totals, order pipeline and recent orders"""
    cache_key = dashboard_cache_key(request.shop.id)
    cached_data = cache.get(cache_key)
    if cached_data:
        return Response(cached_data)

    data = build_dashboard(request.shop, request)
    cache.set(cache_key, data, settings.DASHBOARD_CACHE_TTL)
    logger.debug(f"Dashboard cached for shop {request.shop.id}")
    return Response(data)
