from decimal import Decimal

from django.db import models

from tailorbook.customers.models import Customer
from tailorbook.shops.models import Shop


class OrderStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    IN_PROGRESS = 'in-progress', 'In Progress'
    COMPLETED = 'completed', 'Completed'
    DELIVERED = 'delivered', 'Delivered'


def style_image_path(instance, filename):
    return f"shops/{instance.shop_id}/orders/{filename}"


class Order(models.Model):
    """A garment job for a customer"""
    shop = models.ForeignKey(Shop, on_delete=models.CASCADE, related_name='orders')
    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='orders')
    customer_name = models.CharField(max_length=200, blank=True)
    garment_type = models.CharField(max_length=50)
    style_description = models.TextField()
    style_image = models.ImageField(upload_to=style_image_path, blank=True, null=True)
    due_date = models.DateField()
    price = models.DecimalField(max_digits=12, decimal_places=2)
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=OrderStatus.choices, default=OrderStatus.PENDING)
    # Effective values of the garment's required fields
    measurements = models.JSONField(default=dict, blank=True)
    # key -> {'label', 'value'}
    custom_measurements = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['shop', 'status'], name='orders_shop_status_idx'),
            models.Index(fields=['due_date'], name='orders_due_date_idx'),
        ]

    def __str__(self):
        return f"{self.customer_name} - {self.garment_type}"

    @property
    def gender(self):
        return self.customer.gender

    def compute_balance(self):
        return (self.price or Decimal('0')) - (self.amount_paid or Decimal('0'))

    def save(self, *args, **kwargs):
        if not self.customer_name and self.customer_id:
            self.customer_name = self.customer.full_name
        self.balance = self.compute_balance()
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and ('price' in update_fields or 'amount_paid' in update_fields):
            kwargs['update_fields'] = set(update_fields) | {'balance'}
        super().save(*args, **kwargs)


class Material(models.Model):
    """Fabric, lining, buttons etc. bought for an order"""
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='materials')
    name = models.CharField(max_length=200)
    quantity = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('1.00'))
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2)
    total_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'order_materials'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.name} x {self.quantity}"

    def compute_total_cost(self):
        return ((self.quantity or Decimal('0')) * (self.unit_cost or Decimal('0'))).quantize(Decimal('0.01'))

    def save(self, *args, **kwargs):
        self.total_cost = self.compute_total_cost()
        super().save(*args, **kwargs)
