from django.contrib import admin
from .models import Order, Material


class MaterialInline(admin.TabularInline):
    model = Material
    extra = 0
    readonly_fields = ['total_cost']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'customer_name', 'garment_type', 'status', 'due_date', 'price', 'amount_paid', 'balance', 'shop']
    list_filter = ['status', 'garment_type', 'shop', 'due_date']
    search_fields = ['customer_name', 'garment_type', 'style_description', 'customer__phone']
    readonly_fields = ['balance', 'created_at', 'updated_at']
    inlines = [MaterialInline]


@admin.register(Material)
class MaterialAdmin(admin.ModelAdmin):
    list_display = ['name', 'order', 'quantity', 'unit_cost', 'total_cost', 'created_at']
    search_fields = ['name', 'order__customer_name']
    readonly_fields = ['total_cost', 'created_at', 'updated_at']
