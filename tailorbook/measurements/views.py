from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from .catalog import (
    Gender, get_garment_types_for_gender, get_default_measurements_for_gender,
    get_required_measurements_for_garment, initialize_default_measurements,
)
from .resolver import resolve_measurements
from .serializers import (
    GarmentTypeDefSerializer, MeasurementFieldDefSerializer,
    ResolveRequestSerializer, serialize_resolved,
)


def _gender_catalog(gender):
    return {
        'gender': gender,
        'garment_types': GarmentTypeDefSerializer(get_garment_types_for_gender(gender), many=True).data,
        'fields': MeasurementFieldDefSerializer(get_default_measurements_for_gender(gender).values(), many=True).data,
        'initial_measurements': initialize_default_measurements(gender),
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def catalog(request):
    """Full garment and measurement catalog for every gender"""
    return Response({
        'genders': [{'value': value, 'label': label} for value, label in Gender.choices],
        'catalog': [_gender_catalog(value) for value in Gender.values],
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def gender_catalog(request, gender):
    """Garment types and measurement fields for one gender (empty when unknown)"""
    return Response(_gender_catalog(gender))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def garment_requirements(request, gender, garment_type):
    """Measurement fields a garment needs, in form order"""
    field_defs = get_default_measurements_for_gender(gender)
    required = get_required_measurements_for_garment(gender, garment_type)
    return Response({
        'gender': gender,
        'garment_type': garment_type,
        'required_fields': required,
        'fields': MeasurementFieldDefSerializer(
            [field_defs[key] for key in required if key in field_defs], many=True
        ).data,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def resolve(request):
    """Preview the merge of customer defaults and order values without saving anything"""
    serializer = ResolveRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    resolved = resolve_measurements(
        data.get('gender'),
        data.get('garment_type'),
        data.get('customer_measurements'),
        data.get('order_measurements'),
    )
    return Response(serialize_resolved(resolved))
