from django.contrib import admin
from .models import Shop


@admin.register(Shop)
class ShopAdmin(admin.ModelAdmin):
    list_display = ['shop_name', 'owner_name', 'owner', 'phone_number', 'created_at']
    search_fields = ['shop_name', 'owner_name', 'phone_number', 'owner__username']
    readonly_fields = ['created_at', 'updated_at']
