from django.db.models.signals import post_delete
from django.dispatch import receiver

from tailorbook.shops.media import delete_file
from .models import Order


@receiver(post_delete, sender=Order)
def delete_style_image(sender, instance, **kwargs):
    """Covers direct deletes as well as customer and shop cascades"""
    delete_file(instance.style_image)
