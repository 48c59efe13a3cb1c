from django.contrib import admin
from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['full_name', 'phone', 'gender', 'shop', 'created_at']
    list_filter = ['gender', 'shop']
    search_fields = ['full_name', 'phone', 'address']
    readonly_fields = ['created_at', 'updated_at']
