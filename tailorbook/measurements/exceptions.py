class MeasurementError(ValueError):
    """Base class for measurement input errors"""


class InvalidMeasurementValue(MeasurementError):
    """A value that is not a finite, non-negative number"""

    def __init__(self, value, field=None):
        self.value = value
        self.field = field
        where = f" for '{field}'" if field else ''
        super().__init__(f"Invalid measurement value{where}: {value!r}")


class UnknownMeasurementField(MeasurementError):
    """A field key that is not part of the measurement set being edited"""

    def __init__(self, field):
        self.field = field
        super().__init__(f"Unknown measurement field: {field!r}")
