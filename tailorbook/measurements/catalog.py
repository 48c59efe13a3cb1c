"""
Garment and measurement catalog for Nigerian tailoring.

The tables below are the single source of truth for which body measurements
exist per gender, which garment types a shop offers, and which measurements
each garment needs. They are built once at import time and exposed through
read-only mappings and tuples.
"""
from types import MappingProxyType
from typing import NamedTuple

from django.db import models


class Gender(models.TextChoices):
    MALE = 'male', 'Male'
    FEMALE = 'female', 'Female'


class MeasurementFieldDef(NamedTuple):
    key: str
    label: str
    unit: str


class GarmentTypeDef(NamedTuple):
    value: str
    label: str


INCHES = 'inches'


def _fields(*pairs):
    return MappingProxyType({
        key: MeasurementFieldDef(key, label, INCHES) for key, label in pairs
    })


DEFAULT_MEASUREMENTS = MappingProxyType({
    Gender.MALE.value: _fields(
        ('agbadaLength', 'Agbada Length'),
        ('topLength', 'Top Length'),
        ('chest', 'Chest / Body'),
        ('shoulder', 'Shoulder'),
        ('sleeveLength', 'Sleeve Length'),
        ('neck', 'Neck'),
        ('trouserLength', 'Trouser Length'),
        ('waist', 'Waist'),
        ('hips', 'Hips'),
        ('thigh', 'Thigh / Lap'),
        ('knee', 'Knee'),
        ('trouserMouth', 'Trouser Mouth'),
    ),
    Gender.FEMALE.value: _fields(
        ('bust', 'Bust'),
        ('waist', 'Waist'),
        ('hip', 'Hip'),
        ('shoulder', 'Shoulder'),
        ('neck', 'Neck'),
        ('backLength', 'Back Length'),
        ('sleeveLength', 'Sleeve Length'),
        ('armhole', 'Armhole'),
        ('gownLength', 'Gown Length'),
        ('blouseLength', 'Blouse Length'),
        ('skirtLength', 'Skirt Length'),
        ('trouserLength', 'Trouser Length'),
        ('inseam', 'Inseam'),
        ('thigh', 'Thigh'),
        ('knee', 'Knee'),
        ('ankle', 'Ankle'),
    ),
})

GARMENT_MEASUREMENTS = MappingProxyType({
    Gender.FEMALE.value: MappingProxyType({
        'boubou': ('bust', 'shoulder', 'sleeveLength', 'gownLength'),
        'gown': ('bust', 'waist', 'hip', 'shoulder', 'gownLength', 'sleeveLength', 'backLength'),
        'wrapper-blouse': ('bust', 'waist', 'hip', 'blouseLength', 'skirtLength', 'sleeveLength'),
        'skirt-blouse': ('bust', 'waist', 'hip', 'blouseLength', 'skirtLength', 'sleeveLength'),
        'trousers': ('waist', 'hip', 'thigh', 'trouserLength', 'inseam'),
        'jumpsuit': ('bust', 'waist', 'hip', 'shoulder', 'gownLength', 'sleeveLength', 'trouserLength'),
    }),
    Gender.MALE.value: MappingProxyType({
        'kaftan': ('shoulder', 'chest', 'sleeveLength', 'topLength'),
        'senator': ('shoulder', 'chest', 'waist', 'sleeveLength', 'topLength', 'trouserLength'),
        'agbada': ('shoulder', 'chest', 'sleeveLength', 'agbadaLength'),
        'shirt-trousers': ('shoulder', 'chest', 'waist', 'sleeveLength', 'topLength', 'trouserLength', 'thigh'),
        'trousers': ('waist', 'hips', 'thigh', 'trouserLength', 'trouserMouth'),
        'dashiki': ('shoulder', 'chest', 'sleeveLength', 'topLength'),
    }),
})

GARMENT_TYPES = MappingProxyType({
    Gender.FEMALE.value: (
        GarmentTypeDef('boubou', 'Boubou'),
        GarmentTypeDef('gown', 'Gown'),
        GarmentTypeDef('wrapper-blouse', 'Wrapper & Blouse'),
        GarmentTypeDef('skirt-blouse', 'Skirt & Blouse'),
        GarmentTypeDef('trousers', 'Trousers'),
        GarmentTypeDef('jumpsuit', 'Jumpsuit'),
    ),
    Gender.MALE.value: (
        GarmentTypeDef('kaftan', 'Kaftan'),
        GarmentTypeDef('senator', 'Senator'),
        GarmentTypeDef('agbada', 'Agbada'),
        GarmentTypeDef('shirt-trousers', 'Shirt & Trousers'),
        GarmentTypeDef('trousers', 'Trousers'),
        GarmentTypeDef('dashiki', 'Dashiki'),
    ),
})

_EMPTY = MappingProxyType({})


def get_garment_types_for_gender(gender) -> list:
    """Garment types offered for a gender, in display order. Unknown gender gives []."""
    return list(GARMENT_TYPES.get(gender, ()))


def get_default_measurements_for_gender(gender):
    """Read-only mapping of field key -> MeasurementFieldDef. Unknown gender gives {}."""
    return DEFAULT_MEASUREMENTS.get(gender, _EMPTY)


def get_required_measurements_for_garment(gender, garment_type) -> list:
    """Ordered field keys a garment needs. Unknown gender or garment gives []."""
    return list(GARMENT_MEASUREMENTS.get(gender, _EMPTY).get(garment_type, ()))


def get_garment_label(gender, garment_type):
    for garment in GARMENT_TYPES.get(gender, ()):
        if garment.value == garment_type:
            return garment.label
    return garment_type


def initialize_default_measurements(gender) -> dict:
    """Zero-filled measurement set covering every field defined for the gender."""
    return {key: 0 for key in get_default_measurements_for_gender(gender)}


def extract_order_measurements(customer_measurements, gender, garment_type) -> dict:
    """
    Seed an order's measurement set from the customer's defaults.

    Only the fields the garment requires are copied; a field the customer has
    no value for starts at 0. Existing order values are not consulted.
    """
    customer_measurements = customer_measurements or {}
    return {
        field: customer_measurements.get(field) or 0
        for field in get_required_measurements_for_garment(gender, garment_type)
    }


def find_catalog_inconsistencies() -> list:
    """
    Return (gender, garment_type, field_key) triples for requirement entries
    that reference a field missing from that gender's default table.
    """
    problems = []
    for gender, garments in GARMENT_MEASUREMENTS.items():
        known = DEFAULT_MEASUREMENTS.get(gender, _EMPTY)
        for garment_type, fields in garments.items():
            for field in fields:
                if field not in known:
                    problems.append((gender, garment_type, field))
    offered = {
        (gender, garment.value)
        for gender, garments in GARMENT_TYPES.items()
        for garment in garments
    }
    for gender, garments in GARMENT_MEASUREMENTS.items():
        for garment_type in garments:
            if (gender, garment_type) not in offered:
                problems.append((gender, garment_type, None))
    return problems
