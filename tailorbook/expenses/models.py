from django.db import models

from tailorbook.shops.models import Shop


class ExpenseCategory(models.TextChoices):
    TOOL = 'tool', 'Tool'
    MATERIAL = 'material', 'Material'
    EQUIPMENT = 'equipment', 'Equipment'
    MAINTENANCE = 'maintenance', 'Maintenance'
    RENT = 'rent', 'Rent'
    UTILITIES = 'utilities', 'Utilities'
    OTHER = 'other', 'Other'


class Expense(models.Model):
    """Shop running cost not tied to a single order"""
    shop = models.ForeignKey(Shop, on_delete=models.CASCADE, related_name='expenses')
    item_name = models.CharField(max_length=200)
    category = models.CharField(max_length=20, choices=ExpenseCategory.choices, default=ExpenseCategory.OTHER)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    date = models.DateField()
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'expenses'
        ordering = ['-date', '-created_at']

    def __str__(self):
        return f"{self.item_name} ({self.amount})"
