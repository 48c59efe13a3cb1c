from rest_framework import serializers

from .catalog import (
    get_default_measurements_for_gender, get_garment_label,
    initialize_default_measurements,
)
from .exceptions import MeasurementError
from .resolver import parse_measurement_value


class MeasurementFieldDefSerializer(serializers.Serializer):
    key = serializers.CharField()
    label = serializers.CharField()
    unit = serializers.CharField()


class GarmentTypeDefSerializer(serializers.Serializer):
    value = serializers.CharField()
    label = serializers.CharField()


def clean_measurement_set(gender, raw_values, base=None):
    """
    Validate a customer measurement set against the gender's field table.

    Unknown keys and invalid values raise ValidationError. The result starts
    from `base` (or a zero-filled set) and overlays the parsed values.
    """
    if raw_values is None:
        raw_values = {}
    if not isinstance(raw_values, dict):
        raise serializers.ValidationError('Measurements must be an object of field -> value.')

    known = get_default_measurements_for_gender(gender)
    errors = {}
    cleaned = dict(base) if base is not None else initialize_default_measurements(gender)
    for key, raw in raw_values.items():
        if key not in known:
            errors[key] = f"'{key}' is not a {gender or 'known'} measurement."
            continue
        try:
            cleaned[key] = parse_measurement_value(raw, key)
        except MeasurementError as exc:
            errors[key] = str(exc)
    if errors:
        raise serializers.ValidationError(errors)
    return cleaned


def labelled_measurements(gender, values):
    """Customer measurement set with catalog labels and units, in catalog order"""
    values = values or {}
    return [
        {
            'key': field.key,
            'label': field.label,
            'unit': field.unit,
            'value': values.get(field.key, 0),
        }
        for field in get_default_measurements_for_gender(gender).values()
    ]


def serialize_resolved(resolved):
    """Representation of a ResolvedMeasurements for the order measurement editor"""
    field_defs = get_default_measurements_for_gender(resolved.gender)
    fields = []
    for key, measurement in resolved.fields.items():
        field_def = field_defs.get(key)
        fields.append({
            'key': key,
            'label': field_def.label if field_def else key,
            'unit': field_def.unit if field_def else '',
            'value': measurement.value,
            'provenance': str(measurement.provenance),
            'customer_value': resolved.customer_values.get(key, 0),
        })
    return {
        'state': str(resolved.state),
        'gender': resolved.gender,
        'garment_type': resolved.garment_type,
        'garment_label': get_garment_label(resolved.gender, resolved.garment_type) if resolved.garment_type else None,
        'fields': fields,
        'values': resolved.values(),
        'missing_fields': resolved.missing_fields,
        'has_missing_customer_measurements': resolved.has_missing_customer_measurements,
    }


class ResolveRequestSerializer(serializers.Serializer):
    gender = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    garment_type = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    customer_measurements = serializers.DictField(required=False, default=dict)
    order_measurements = serializers.DictField(required=False, default=dict)


class MeasurementEditSerializer(serializers.Serializer):
    field = serializers.CharField()
    value = serializers.JSONField(required=False, allow_null=True)


class MeasurementResetSerializer(serializers.Serializer):
    field = serializers.CharField()
