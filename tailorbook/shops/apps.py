from django.apps import AppConfig


class ShopsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'tailorbook.shops'

    def ready(self):
        import tailorbook.shops.signals  # noqa: F401
