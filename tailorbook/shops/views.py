import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from tailorbook.core.utils import create_audit_log, json_safe
from .media import delete_file
from .permissions import get_user_shop
from .serializers import ShopSerializer, ShopLogoSerializer

logger = logging.getLogger('tailorbook.shops')


@api_view(['GET', 'POST', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def shop_profile(request):
    """Get, create or update the caller's shop"""
    shop = get_user_shop(request.user)

    if request.method == 'GET':
        if shop is None:
            return Response({'error': 'No shop has been set up yet.'}, status=status.HTTP_404_NOT_FOUND)
        return Response(ShopSerializer(shop, context={'request': request}).data)

    if request.method == 'POST':
        if shop is not None:
            return Response({'error': 'This account already has a shop.'}, status=status.HTTP_400_BAD_REQUEST)
        serializer = ShopSerializer(data=request.data, context={'request': request})
        if serializer.is_valid():
            shop = serializer.save(owner=request.user)
            create_audit_log(request, 'create', 'Shop', shop.id, json_safe(serializer.data), object_name=shop.shop_name)
            logger.info(f"Shop {shop.id} created for user {request.user.id}")
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    if shop is None:
        return Response({'error': 'No shop has been set up yet.'}, status=status.HTTP_404_NOT_FOUND)
    serializer = ShopSerializer(shop, data=request.data, partial=request.method == 'PATCH', context={'request': request})
    if serializer.is_valid():
        serializer.save()
        create_audit_log(request, 'update', 'Shop', shop.id, json_safe(dict(serializer.validated_data)), object_name=shop.shop_name)
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def shop_logo(request):
    """Upload (replacing any previous one) or remove the shop logo"""
    shop = get_user_shop(request.user)
    if shop is None:
        return Response({'error': 'No shop has been set up yet.'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'DELETE':
        if shop.logo:
            delete_file(shop.logo)
            shop.logo = None
            shop.save(update_fields=['logo', 'updated_at'])
            create_audit_log(request, 'image_remove', 'Shop', shop.id, object_name=shop.shop_name)
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = ShopLogoSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    if shop.logo:
        delete_file(shop.logo)
    shop.logo = serializer.validated_data['logo']
    shop.save(update_fields=['logo', 'updated_at'])
    create_audit_log(request, 'image_upload', 'Shop', shop.id, {'logo': shop.logo.name}, object_name=shop.shop_name)
    return Response(ShopSerializer(shop, context={'request': request}).data)
