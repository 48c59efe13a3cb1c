from django.conf import settings
from rest_framework import serializers

from .media import validate_image_size
from .models import Shop


class ShopSerializer(serializers.ModelSerializer):
    logo_url = serializers.SerializerMethodField()
    currency_symbol = serializers.SerializerMethodField()

    class Meta:
        model = Shop
        fields = ['id', 'shop_name', 'owner_name', 'phone_number', 'address', 'logo', 'logo_url',
                  'currency_symbol', 'created_at', 'updated_at']
        read_only_fields = ['logo', 'created_at', 'updated_at']

    def get_logo_url(self, obj):
        if not obj.logo:
            return None
        request = self.context.get('request')
        return request.build_absolute_uri(obj.logo.url) if request else obj.logo.url

    def get_currency_symbol(self, obj):
        return settings.TAILORBOOK_CURRENCY_SYMBOL

    def validate_shop_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Shop name is required.')
        return value.strip()

    def validate_owner_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Owner name is required.')
        return value.strip()


class ShopLogoSerializer(serializers.Serializer):
    logo = serializers.ImageField()

    def validate_logo(self, value):
        return validate_image_size(value, settings.SHOP_LOGO_MAX_BYTES)
