from django.db.models.signals import post_delete
from django.dispatch import receiver

from .media import delete_file
from .models import Shop


@receiver(post_delete, sender=Shop)
def delete_shop_logo(sender, instance, **kwargs):
    delete_file(instance.logo)
