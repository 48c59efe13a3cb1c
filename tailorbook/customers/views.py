import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework.exceptions import ValidationError
from django.db.models import Count, Sum
from django.shortcuts import get_object_or_404
from decimal import Decimal

from tailorbook.core.utils import create_audit_log, json_safe
from tailorbook.measurements.serializers import clean_measurement_set
from tailorbook.orders.serializers import OrderListSerializer
from tailorbook.shops.permissions import HasShop
from .filters import CustomerFilter
from .models import Customer
from .serializers import CustomerSerializer, CustomerMeasurementsSerializer, customer_measurements_payload

logger = logging.getLogger('tailorbook.customers')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasShop])
def customer_list_create(request):
    """List the shop's customers or create a new customer"""
    if request.method == 'GET':
        queryset = Customer.objects.filter(shop=request.shop).annotate(order_count=Count('orders'))
        filterset = CustomerFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = CustomerSerializer(filterset.qs, many=True)
        return Response(serializer.data)

    serializer = CustomerSerializer(data=request.data, context={'shop': request.shop})
    if serializer.is_valid():
        customer = serializer.save(shop=request.shop)
        create_audit_log(request, 'create', 'Customer', customer.id, json_safe(serializer.data), object_name=customer.full_name)
        logger.info(f"Customer {customer.id} created in shop {request.shop.id}")
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, HasShop])
def customer_detail(request, pk):
    """Retrieve, update or delete a customer"""
    customer = get_object_or_404(Customer, pk=pk, shop=request.shop)

    if request.method == 'GET':
        data = CustomerSerializer(customer).data
        orders = customer.orders.all().order_by('-created_at')
        totals = orders.aggregate(
            total_billed=Sum('price'),
            total_paid=Sum('amount_paid'),
            outstanding_balance=Sum('balance'),
        )
        data['orders'] = OrderListSerializer(orders, many=True).data
        data['totals'] = {
            'orders': orders.count(),
            'total_billed': float(totals['total_billed'] or Decimal('0')),
            'total_paid': float(totals['total_paid'] or Decimal('0')),
            'outstanding_balance': float(totals['outstanding_balance'] or Decimal('0')),
        }
        return Response(data)

    if request.method in ('PUT', 'PATCH'):
        previous_gender = customer.gender
        serializer = CustomerSerializer(customer, data=request.data, partial=request.method == 'PATCH',
                                        context={'shop': request.shop})
        if serializer.is_valid():
            customer = serializer.save()
            changes = json_safe(dict(serializer.validated_data))
            if customer.gender != previous_gender:
                changes['gender_changed_from'] = previous_gender
                logger.info(f"Customer {customer.id} gender changed, measurements re-initialised")
            create_audit_log(request, 'update', 'Customer', customer.id, changes, object_name=customer.full_name)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    # DELETE: orders, their materials and style images go with the customer
    customer_id = customer.id
    customer_name = customer.full_name
    order_count = customer.orders.count()
    customer.delete()
    create_audit_log(request, 'delete', 'Customer', customer_id, {'orders_deleted': order_count}, object_name=customer_name)
    logger.info(f"Customer {customer_id} deleted with {order_count} orders")
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated, HasShop])
def customer_measurements(request, pk):
    """
    Get or update a customer's default measurements.

    PUT replaces the whole set (fields not supplied go back to 0), PATCH only
    touches the supplied fields.
    """
    customer = get_object_or_404(Customer, pk=pk, shop=request.shop)

    if request.method == 'GET':
        return Response(customer_measurements_payload(customer))

    serializer = CustomerMeasurementsSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    base = customer.measurements if request.method == 'PATCH' else None
    try:
        measurements = clean_measurement_set(customer.gender, serializer.validated_data['measurements'], base)
    except ValidationError as exc:
        return Response({'measurements': exc.detail}, status=status.HTTP_400_BAD_REQUEST)

    customer.measurements = measurements
    customer.save(update_fields=['measurements', 'updated_at'])
    create_audit_log(request, 'measurement_edit', 'Customer', customer.id, {'measurements': measurements},
                     object_name=customer.full_name)
    return Response(customer_measurements_payload(customer))


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasShop])
def customer_orders(request, pk):
    """A customer's orders, newest first"""
    customer = get_object_or_404(Customer, pk=pk, shop=request.shop)
    orders = customer.orders.all().order_by('-created_at')
    return Response(OrderListSerializer(orders, many=True).data)
