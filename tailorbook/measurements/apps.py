from django.apps import AppConfig


class MeasurementsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'tailorbook.measurements'

    def ready(self):
        """Register the catalog consistency check"""
        import tailorbook.measurements.checks  # noqa: F401
