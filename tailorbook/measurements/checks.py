from django.core.checks import Warning, register

from .catalog import find_catalog_inconsistencies


@register()
def measurement_catalog_check(app_configs, **kwargs):
    """Every garment requirement must point at a defined measurement field"""
    errors = []
    for gender, garment_type, field in find_catalog_inconsistencies():
        if field is None:
            errors.append(Warning(
                f"Garment '{garment_type}' has measurement requirements but is not offered for {gender}.",
                id='measurements.W002',
            ))
        else:
            errors.append(Warning(
                f"Garment '{garment_type}' ({gender}) requires '{field}', which is not a defined {gender} measurement.",
                hint='Add the field to DEFAULT_MEASUREMENTS or remove it from GARMENT_MEASUREMENTS.',
                id='measurements.W001',
            ))
    return errors
