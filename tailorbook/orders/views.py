import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Count, Sum
from django.shortcuts import get_object_or_404
from decimal import Decimal

from tailorbook.core.utils import create_audit_log, json_safe
from tailorbook.measurements.custom import CustomMeasurementSet
from tailorbook.measurements.exceptions import MeasurementError
from tailorbook.measurements.resolver import MeasurementSession, ResolutionState, resolve_measurements
from tailorbook.measurements.serializers import (
    MeasurementEditSerializer, MeasurementResetSerializer, serialize_resolved,
)
from tailorbook.shops.media import delete_file
from tailorbook.shops.permissions import HasShop
from .filters import OrderFilter
from .models import Order, Material, OrderStatus
from .serializers import (
    OrderSerializer, OrderListSerializer, MaterialSerializer, OrderStatusSerializer, StyleImageSerializer,
    CustomMeasurementAddSerializer, CustomMeasurementUpdateSerializer,
)

logger = logging.getLogger('tailorbook.orders')


def _get_order(request, pk):
    return get_object_or_404(Order.objects.select_related('customer'), pk=pk, shop=request.shop)


def _status_counts(queryset):
    counts = {value: 0 for value in OrderStatus.values}
    for row in queryset.values('status').annotate(count=Count('id')):
        counts[row['status']] = row['count']
    counts['all'] = sum(counts.values())
    return counts


def _order_detail_payload(order, request):
    data = OrderSerializer(order, context={'request': request}).data
    materials = order.materials.all()
    material_cost = materials.aggregate(total=Sum('total_cost'))['total'] or Decimal('0')
    data['materials'] = MaterialSerializer(materials, many=True).data
    data['total_material_cost'] = float(material_cost)
    data['net_profit'] = float(order.price - material_cost)
    return data


# Order views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasShop])
def order_list_create(request):
    """List the shop's orders (with status counts) or create an order"""
    if request.method == 'GET':
        base = Order.objects.filter(shop=request.shop)
        filterset = OrderFilter(request.query_params, queryset=base.select_related('customer'))
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        orders = filterset.qs
        return Response({
            'count': orders.count(),
            'status_counts': _status_counts(base),
            'results': OrderListSerializer(orders, many=True, context={'request': request}).data,
        })

    serializer = OrderSerializer(data=request.data, context={'shop': request.shop, 'request': request})
    if serializer.is_valid():
        order = serializer.save(shop=request.shop)
        create_audit_log(request, 'create', 'Order', order.id, json_safe(serializer.data),
                         object_name=f"{order.customer_name} - {order.garment_type}")
        logger.info(f"Order {order.id} created for customer {order.customer_id}")
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, HasShop])
def order_detail(request, pk):
    """Retrieve, update or delete an order"""
    order = _get_order(request, pk)

    if request.method == 'GET':
        return Response(_order_detail_payload(order, request))

    if request.method in ('PUT', 'PATCH'):
        previous_status = order.status
        serializer = OrderSerializer(order, data=request.data, partial=request.method == 'PATCH',
                                     context={'shop': request.shop, 'request': request})
        if serializer.is_valid():
            order = serializer.save()
            create_audit_log(request, 'update', 'Order', order.id, json_safe(serializer.data),
                             object_name=f"{order.customer_name} - {order.garment_type}")
            if order.status != previous_status:
                create_audit_log(request, 'status_change', 'Order', order.id,
                                 {'from': previous_status, 'to': order.status}, object_name=order.customer_name)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    # DELETE: materials cascade, the style image is removed by the post_delete signal
    order_id = order.id
    object_name = f"{order.customer_name} - {order.garment_type}"
    order.delete()
    create_audit_log(request, 'delete', 'Order', order_id, object_name=object_name)
    logger.info(f"Order {order_id} deleted")
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasShop])
def order_update_status(request, pk):
    """Move an order to another status"""
    order = _get_order(request, pk)
    serializer = OrderStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    previous_status = order.status
    order.status = serializer.validated_data['status']
    order.save(update_fields=['status', 'updated_at'])
    if order.status != previous_status:
        create_audit_log(request, 'status_change', 'Order', order.id,
                         {'from': previous_status, 'to': order.status}, object_name=order.customer_name)
    return Response(OrderListSerializer(order, context={'request': request}).data)


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated, HasShop])
@parser_classes([MultiPartParser, FormParser])
def order_style_image(request, pk):
    """Upload (replacing any previous one) or remove the style reference image"""
    order = _get_order(request, pk)

    if request.method == 'DELETE':
        if order.style_image:
            delete_file(order.style_image)
            order.style_image = None
            order.save(update_fields=['style_image', 'updated_at'])
            create_audit_log(request, 'image_remove', 'Order', order.id, object_name=order.customer_name)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = StyleImageSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    if order.style_image:
        delete_file(order.style_image)
    order.style_image = serializer.validated_data['style_image']
    order.save(update_fields=['style_image', 'updated_at'])
    create_audit_log(request, 'image_upload', 'Order', order.id, {'style_image': order.style_image.name},
                     object_name=order.customer_name)
    return Response(OrderSerializer(order, context={'request': request}).data)


# Measurement editor views
def _measurement_session(order):
    customer = order.customer
    return MeasurementSession(customer.gender, order.garment_type, customer.measurements, order.measurements)


def _save_session(request, order, session, action, changes):
    # Without required fields there is no map to store; keep what the order has
    if session.state == ResolutionState.READY:
        order.measurements = session.values()
        order.save(update_fields=['measurements', 'updated_at'])
        create_audit_log(request, action, 'Order', order.id, changes, object_name=order.customer_name)
    return Response(serialize_resolved(session.resolved))


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, HasShop])
def order_measurements(request, pk):
    """
    The order's measurements merged with the customer's defaults.

    GET returns every required field with its effective value and whether it
    is the customer's default or was edited for this order. PUT applies several
    edits at once: {"measurements": {field: value}}.
    """
    order = _get_order(request, pk)
    if request.method == 'GET':
        customer = order.customer
        resolved = resolve_measurements(customer.gender, order.garment_type, customer.measurements, order.measurements)
        return Response(serialize_resolved(resolved))

    values = request.data.get('measurements')
    if not isinstance(values, dict):
        return Response({'measurements': 'Measurements must be an object of field -> value.'},
                        status=status.HTTP_400_BAD_REQUEST)
    session = _measurement_session(order)
    try:
        session.update(values)
    except MeasurementError as exc:
        return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)
    return _save_session(request, order, session, 'measurement_edit', {'measurements': values})


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasShop])
def order_measurement_edit(request, pk):
    """Set one field for this order only"""
    order = _get_order(request, pk)
    serializer = MeasurementEditSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    field = serializer.validated_data['field']
    value = serializer.validated_data.get('value')
    session = _measurement_session(order)
    try:
        session.edit(field, value)
    except MeasurementError as exc:
        return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)
    return _save_session(request, order, session, 'measurement_edit', {'field': field, 'value': value})


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasShop])
def order_measurement_reset(request, pk):
    """Put one field back to the customer's default"""
    order = _get_order(request, pk)
    serializer = MeasurementResetSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    field = serializer.validated_data['field']
    session = _measurement_session(order)
    try:
        session.reset_to_default(field)
    except MeasurementError as exc:
        return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)
    return _save_session(request, order, session, 'measurement_reset', {'field': field})


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasShop])
def order_measurement_reset_all(request, pk):
    """Put every required field back to the customer's defaults"""
    order = _get_order(request, pk)
    session = _measurement_session(order)
    session.reset_all_to_defaults()
    return _save_session(request, order, session, 'measurement_reset', {'field': '*'})


# Custom measurement views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasShop])
def order_custom_measurements(request, pk):
    """List or add freeform measurements on an order"""
    order = _get_order(request, pk)
    if request.method == 'GET':
        return Response(order.custom_measurements)

    serializer = CustomMeasurementAddSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    custom = CustomMeasurementSet(order.custom_measurements)
    try:
        key = custom.add_field(serializer.validated_data['label'], serializer.validated_data.get('value'))
    except MeasurementError as exc:
        return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)
    if key is None:
        return Response({'label': 'Label is required.'}, status=status.HTTP_400_BAD_REQUEST)
    order.custom_measurements = custom.to_dict()
    order.save(update_fields=['custom_measurements', 'updated_at'])
    create_audit_log(request, 'measurement_edit', 'Order', order.id, {'custom': {key: custom[key]}},
                     object_name=order.customer_name)
    return Response({'key': key, 'custom_measurements': order.custom_measurements}, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, HasShop])
def order_custom_measurement_detail(request, pk, key):
    """Change or remove one freeform measurement"""
    order = _get_order(request, pk)
    custom = CustomMeasurementSet(order.custom_measurements)

    if request.method == 'DELETE':
        if key in custom:
            custom.remove_field(key)
            order.custom_measurements = custom.to_dict()
            order.save(update_fields=['custom_measurements', 'updated_at'])
            create_audit_log(request, 'measurement_edit', 'Order', order.id, {'custom_removed': key},
                             object_name=order.customer_name)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = CustomMeasurementUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        custom.update_field(key, serializer.validated_data.get('value'))
    except MeasurementError as exc:
        return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)
    order.custom_measurements = custom.to_dict()
    order.save(update_fields=['custom_measurements', 'updated_at'])
    create_audit_log(request, 'measurement_edit', 'Order', order.id, {'custom': {key: custom[key]}},
                     object_name=order.customer_name)
    return Response(order.custom_measurements)


# Material views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasShop])
def material_list_create(request, pk):
    """List or add materials bought for an order"""
    order = _get_order(request, pk)
    if request.method == 'GET':
        materials = order.materials.all()
        total = materials.aggregate(total=Sum('total_cost'))['total'] or Decimal('0')
        return Response({
            'results': MaterialSerializer(materials, many=True).data,
            'total_material_cost': float(total),
        })

    serializer = MaterialSerializer(data=request.data)
    if serializer.is_valid():
        material = serializer.save(order=order)
        create_audit_log(request, 'create', 'Material', material.id, json_safe(serializer.data), object_name=material.name)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, HasShop])
def material_detail(request, pk, material_id):
    """Retrieve, update or delete a material"""
    order = _get_order(request, pk)
    material = get_object_or_404(Material, pk=material_id, order=order)

    if request.method == 'GET':
        return Response(MaterialSerializer(material).data)

    if request.method in ('PUT', 'PATCH'):
        serializer = MaterialSerializer(material, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request, 'update', 'Material', material.id, json_safe(dict(serializer.validated_data)),
                             object_name=material.name)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    material_pk = material.id
    material_name = material.name
    material.delete()
    create_audit_log(request, 'delete', 'Material', material_pk, object_name=material_name)
    return Response(status=status.HTTP_204_NO_CONTENT)
