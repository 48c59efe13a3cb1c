from django.contrib import admin
from .models import Expense


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['item_name', 'category', 'amount', 'date', 'shop']
    list_filter = ['category', 'date', 'shop']
    search_fields = ['item_name', 'notes']
    readonly_fields = ['created_at', 'updated_at']
