from django.db import models

from tailorbook.measurements.catalog import Gender, initialize_default_measurements
from tailorbook.shops.models import Shop, phone_validator


class Customer(models.Model):
    """A client of the shop with standing body measurements"""
    shop = models.ForeignKey(Shop, on_delete=models.CASCADE, related_name='customers')
    full_name = models.CharField(max_length=200)
    phone = models.CharField(max_length=30, validators=[phone_validator])
    address = models.TextField(blank=True)
    gender = models.CharField(max_length=10, choices=Gender.choices)
    # field key -> number, exactly the keys of the gender's measurement table
    measurements = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'customers'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['shop', 'phone'], name='unique_customer_phone_per_shop'),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.phone})"

    def reset_measurements(self):
        """Replace the measurement set with a zero-filled one for the current gender"""
        self.measurements = initialize_default_measurements(self.gender)
