"""
Merge a customer's standing measurements with an order's stored values.

For every field the garment requires, the effective value is the order's value
when the order has one and the customer's default otherwise. Each field carries
a provenance tag: ``default`` while the effective value equals the customer's
default, ``edited`` once it differs. A customer field that was never recorded
counts as 0 and is reported in ``missing_fields`` so callers can warn without
blocking order entry.

``resolve_measurements`` is the pure merge. ``MeasurementSession`` wraps it for
an editing session (the order measurement editor): edits and resets update one
field or all of them, and ``values()`` is the full effective set to persist.
"""
import logging
import math
from decimal import Decimal
from typing import NamedTuple

from django.db import models

from .catalog import get_required_measurements_for_garment
from .exceptions import InvalidMeasurementValue, UnknownMeasurementField

logger = logging.getLogger(__name__)


class Provenance(models.TextChoices):
    DEFAULT = 'default', 'Default'
    EDITED = 'edited', 'Edited'


class ResolutionState(models.TextChoices):
    UNCONFIGURED = 'unconfigured', 'Gender or garment type not selected'
    NO_REQUIREMENTS = 'no_requirements', 'No specific measurements required'
    READY = 'ready', 'Ready'


class EffectiveMeasurement(NamedTuple):
    value: float
    provenance: str


def parse_measurement_value(raw, field=None):
    """
    Turn user input into a measurement number.

    Blank input (None or an empty/whitespace string) means "not yet measured"
    and becomes 0. Anything else must be a finite, non-negative number or a
    string holding one; otherwise InvalidMeasurementValue is raised.
    """
    if raw is None:
        return 0
    if isinstance(raw, bool):
        raise InvalidMeasurementValue(raw, field)
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return 0
        try:
            value = float(text)
        except ValueError:
            raise InvalidMeasurementValue(raw, field) from None
    elif isinstance(raw, (int, float, Decimal)):
        value = raw
    else:
        raise InvalidMeasurementValue(raw, field)

    if isinstance(value, Decimal):
        value = float(value)
    if not math.isfinite(value) or value < 0:
        raise InvalidMeasurementValue(raw, field)
    return value


def _stored_number(value):
    """Stored values are numbers already; anything unreadable counts as absent."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    try:
        return parse_measurement_value(value)
    except InvalidMeasurementValue:
        logger.warning("Ignoring unreadable stored measurement value %r", value)
        return None


def customer_default(customer_measurements, field):
    """The customer's default for a field; absent means 0."""
    value = _stored_number((customer_measurements or {}).get(field))
    return value if value is not None else 0


def provenance_for(value, customer_value):
    """Default while the value equals the customer's; edited otherwise."""
    if float(value) == float(customer_value):
        return Provenance.DEFAULT
    return Provenance.EDITED


class ResolvedMeasurements:
    """Outcome of a merge: per-field effective values plus warnings"""

    def __init__(self, state, fields=None, customer_values=None, missing_fields=None,
                 gender=None, garment_type=None):
        self.state = state
        self.fields = fields or {}
        self.customer_values = customer_values or {}
        self.missing_fields = missing_fields or []
        self.gender = gender
        self.garment_type = garment_type

    @property
    def required_fields(self):
        return list(self.fields)

    @property
    def has_missing_customer_measurements(self):
        return bool(self.missing_fields)

    def values(self):
        return {field: measurement.value for field, measurement in self.fields.items()}

    def badges(self):
        return {field: measurement.provenance for field, measurement in self.fields.items()}

    def __eq__(self, other):
        if not isinstance(other, ResolvedMeasurements):
            return NotImplemented
        return (self.state, self.fields, self.missing_fields) == (other.state, other.fields, other.missing_fields)

    def __repr__(self):
        return f"<ResolvedMeasurements {self.state} {dict(self.fields)!r}>"


def _missing_fields(required_fields, customer_measurements):
    customer_measurements = customer_measurements or {}
    missing = []
    for field in required_fields:
        if not _stored_number(customer_measurements.get(field)):
            missing.append(field)
    return missing


def resolve_measurements(gender, garment_type, customer_measurements=None, order_measurements=None):
    """Merge customer defaults and order values for the garment's required fields."""
    if not gender or not garment_type:
        return ResolvedMeasurements(ResolutionState.UNCONFIGURED, gender=gender, garment_type=garment_type)

    required_fields = get_required_measurements_for_garment(gender, garment_type)
    if not required_fields:
        return ResolvedMeasurements(ResolutionState.NO_REQUIREMENTS, gender=gender, garment_type=garment_type)

    order_measurements = order_measurements or {}
    fields = {}
    customer_values = {}
    for field in required_fields:
        customer_value = customer_default(customer_measurements, field)
        customer_values[field] = customer_value
        order_value = _stored_number(order_measurements.get(field))
        if order_value is not None:
            fields[field] = EffectiveMeasurement(order_value, provenance_for(order_value, customer_value))
        else:
            fields[field] = EffectiveMeasurement(customer_value, Provenance.DEFAULT)

    return ResolvedMeasurements(
        ResolutionState.READY,
        fields=fields,
        customer_values=customer_values,
        missing_fields=_missing_fields(required_fields, customer_measurements),
        gender=gender,
        garment_type=garment_type,
    )


class MeasurementSession:
    """
    Editing state for one order's measurements.

    Holds the merged map in memory. Every mutation returns the full effective
    value set, which is what gets saved back onto the order.
    """

    def __init__(self, gender, garment_type, customer_measurements=None, order_measurements=None):
        self.gender = gender
        self.garment_type = garment_type
        self.customer_measurements = dict(customer_measurements or {})
        self._resolved = resolve_measurements(gender, garment_type, self.customer_measurements, order_measurements)

    @property
    def state(self):
        return self._resolved.state

    @property
    def resolved(self):
        return self._resolved

    def _require_field(self, field):
        if field not in self._resolved.fields:
            raise UnknownMeasurementField(field)

    def _set(self, field, value):
        customer_value = self._resolved.customer_values[field]
        self._resolved.fields[field] = EffectiveMeasurement(value, provenance_for(value, customer_value))

    def edit(self, field, raw_value):
        self._require_field(field)
        self._set(field, parse_measurement_value(raw_value, field))
        return self.values()

    def update(self, raw_values):
        """Apply several edits; all values are validated before any is applied."""
        parsed = {}
        for field, raw_value in (raw_values or {}).items():
            self._require_field(field)
            parsed[field] = parse_measurement_value(raw_value, field)
        for field, value in parsed.items():
            self._set(field, value)
        return self.values()

    def reset_to_default(self, field):
        self._require_field(field)
        self._set(field, self._resolved.customer_values[field])
        return self.values()

    def reset_all_to_defaults(self):
        for field, customer_value in self._resolved.customer_values.items():
            self._resolved.fields[field] = EffectiveMeasurement(customer_value, Provenance.DEFAULT)
        return self.values()

    def values(self):
        return self._resolved.values()

    def badges(self):
        return self._resolved.badges()
