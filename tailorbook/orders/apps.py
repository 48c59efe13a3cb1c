from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'tailorbook.orders'

    def ready(self):
        import tailorbook.orders.signals  # noqa: F401
