from django.conf import settings
from django.core.validators import RegexValidator
from django.db import models

phone_validator = RegexValidator(
    regex=r'^[+]?[0-9\s\-()]{10,}$',
    message='Enter a valid phone number (at least 10 digits, may start with +).',
)


def shop_logo_path(instance, filename):
    return f"shops/{instance.owner_id}/logo/{filename}"


class Shop(models.Model):
    """The tailoring business an owner account runs. One per user."""
    owner = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='shop')
    shop_name = models.CharField(max_length=200)
    owner_name = models.CharField(max_length=200)
    phone_number = models.CharField(max_length=30, validators=[phone_validator])
    address = models.TextField()
    logo = models.ImageField(upload_to=shop_logo_path, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'shops'
        ordering = ['shop_name']

    def __str__(self):
        return self.shop_name
