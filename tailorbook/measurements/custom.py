"""Freeform per-order measurements outside the catalog (e.g. "Sleeve Slant")."""
import re

from .exceptions import UnknownMeasurementField
from .resolver import parse_measurement_value

_WHITESPACE = re.compile(r'\s+')


def custom_field_key(label):
    """'Sleeve Slant' -> 'sleeve_slant'. Labels differing only in case or spacing share a key."""
    return _WHITESPACE.sub('_', label.lower())


class CustomMeasurementSet:
    """
    Mapping of key -> {'label', 'value'}.

    Adding a label whose key already exists replaces the earlier entry.
    """

    def __init__(self, fields=None):
        self._fields = {
            key: {'label': entry.get('label', key), 'value': entry.get('value', 0)}
            for key, entry in (fields or {}).items()
        }

    def add_field(self, label, value=None):
        """Add a field and return its key; a blank label adds nothing and returns None."""
        if not label or not label.strip():
            return None
        key = custom_field_key(label)
        self._fields[key] = {
            'label': label.strip(),
            'value': parse_measurement_value(value, key),
        }
        return key

    def update_field(self, key, value):
        if key not in self._fields:
            raise UnknownMeasurementField(key)
        self._fields[key] = {
            **self._fields[key],
            'value': parse_measurement_value(value, key),
        }

    def remove_field(self, key):
        self._fields.pop(key, None)

    def to_dict(self):
        return {key: dict(entry) for key, entry in self._fields.items()}

    def __contains__(self, key):
        return key in self._fields

    def __getitem__(self, key):
        return self._fields[key]

    def __len__(self):
        return len(self._fields)

    def __iter__(self):
        return iter(self._fields)
