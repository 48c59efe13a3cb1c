from decimal import Decimal

from django.conf import settings
from django.utils import timezone
from rest_framework import serializers

from tailorbook.customers.models import Customer
from tailorbook.measurements.catalog import Gender, extract_order_measurements, get_garment_label
from tailorbook.measurements.custom import CustomMeasurementSet
from tailorbook.measurements.exceptions import MeasurementError
from tailorbook.measurements.resolver import MeasurementSession, ResolutionState
from tailorbook.measurements.serializers import clean_measurement_set
from tailorbook.shops.media import validate_image_size
from tailorbook.shops.models import phone_validator
from .models import Order, Material, OrderStatus


def merge_order_measurements(gender, garment_type, customer_measurements, supplied=None, stored=None):
    """
    Effective measurement set for an order.

    With nothing supplied the order is seeded from the customer's defaults.
    Otherwise the supplied values are merged over ``stored`` (the order's
    current set, when it still applies) and then the defaults; fields the
    garment does not need are dropped.
    """
    if not supplied and stored is None:
        return extract_order_measurements(customer_measurements, gender, garment_type)
    session = MeasurementSession(gender, garment_type, customer_measurements, stored)
    if session.state != ResolutionState.READY:
        return dict(stored or {})
    required = set(session.resolved.fields)
    return session.update({field: value for field, value in (supplied or {}).items() if field in required})


def clean_custom_measurements(raw):
    """Rebuild a custom set from {key: {label, value}}; keys are re-derived from labels."""
    if not isinstance(raw, dict):
        raise serializers.ValidationError('Custom measurements must be an object of key -> {label, value}.')
    custom = CustomMeasurementSet()
    for key, entry in raw.items():
        if not isinstance(entry, dict):
            raise serializers.ValidationError(f"'{key}' must be an object with a label and a value.")
        try:
            custom.add_field(entry.get('label') or key, entry.get('value'))
        except MeasurementError as exc:
            raise serializers.ValidationError(str(exc))
    return custom.to_dict()


def style_image_url(obj, request=None):
    if not obj.style_image:
        return None
    return request.build_absolute_uri(obj.style_image.url) if request else obj.style_image.url


class NewCustomerSerializer(serializers.Serializer):
    """Customer details captured on the order form"""
    full_name = serializers.CharField(max_length=200)
    phone = serializers.CharField(max_length=30, validators=[phone_validator])
    address = serializers.CharField(required=False, allow_blank=True, default='')
    gender = serializers.ChoiceField(choices=Gender.choices)
    measurements = serializers.JSONField(required=False)

    def validate(self, attrs):
        attrs['full_name'] = attrs['full_name'].strip()
        attrs['phone'] = attrs['phone'].strip()
        if not attrs['full_name']:
            raise serializers.ValidationError({'full_name': 'Full name is required.'})
        try:
            attrs['measurements'] = clean_measurement_set(attrs['gender'], attrs.get('measurements'))
        except serializers.ValidationError as exc:
            raise serializers.ValidationError({'measurements': exc.detail})
        return attrs


class OrderListSerializer(serializers.ModelSerializer):
    garment_label = serializers.SerializerMethodField()
    style_image_url = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = ['id', 'customer', 'customer_name', 'garment_type', 'garment_label', 'due_date',
                  'price', 'amount_paid', 'balance', 'status', 'style_image_url', 'created_at']

    def get_garment_label(self, obj):
        return get_garment_label(obj.customer.gender, obj.garment_type)

    def get_style_image_url(self, obj):
        return style_image_url(obj, self.context.get('request'))


class OrderSerializer(serializers.ModelSerializer):
    """
    Order create/update.

    The shop comes from context['shop']. Create takes either an existing
    `customer` or a `new_customer` block; a new customer whose phone is already
    on file in the shop reuses that record.
    """
    customer = serializers.PrimaryKeyRelatedField(queryset=Customer.objects.none(), required=False)
    new_customer = NewCustomerSerializer(required=False, write_only=True)
    gender = serializers.CharField(source='customer.gender', read_only=True)
    garment_label = serializers.SerializerMethodField()
    style_image_url = serializers.SerializerMethodField()
    measurements = serializers.JSONField(required=False)
    custom_measurements = serializers.JSONField(required=False)

    class Meta:
        model = Order
        fields = ['id', 'customer', 'new_customer', 'customer_name', 'gender', 'garment_type', 'garment_label',
                  'style_description', 'style_image', 'style_image_url', 'due_date', 'price', 'amount_paid',
                  'balance', 'notes', 'status', 'measurements', 'custom_measurements', 'created_at', 'updated_at']
        read_only_fields = ['customer_name', 'style_image', 'balance', 'created_at', 'updated_at']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        shop = self.context.get('shop')
        if shop is not None:
            self.fields['customer'].queryset = Customer.objects.filter(shop=shop)

    def get_garment_label(self, obj):
        return get_garment_label(obj.customer.gender, obj.garment_type)

    def get_style_image_url(self, obj):
        return style_image_url(obj, self.context.get('request'))

    def validate_garment_type(self, value):
        if not value.strip():
            raise serializers.ValidationError('Garment type is required.')
        return value.strip()

    def validate_style_description(self, value):
        if not value.strip():
            raise serializers.ValidationError('Style description is required.')
        return value.strip()

    def validate_price(self, value):
        if value <= 0:
            raise serializers.ValidationError('Price must be greater than zero.')
        return value

    def validate_amount_paid(self, value):
        if value < 0:
            raise serializers.ValidationError('Amount paid cannot be negative.')
        return value

    def validate_due_date(self, value):
        if self.instance is None and value < timezone.localdate():
            raise serializers.ValidationError('Due date cannot be in the past.')
        return value

    def validate_custom_measurements(self, value):
        return clean_custom_measurements(value)

    def _customer_for(self, attrs):
        """(customer or None, gender, customer measurements) the order will belong to"""
        instance = self.instance
        shop = self.context.get('shop') or (instance.shop if instance else None)
        new_customer = attrs.get('new_customer')

        if instance is None:
            if new_customer and attrs.get('customer'):
                raise serializers.ValidationError('Choose an existing customer or enter a new one, not both.')
            if not new_customer and not attrs.get('customer'):
                raise serializers.ValidationError({'customer': 'Select a customer or enter new customer details.'})
        elif new_customer:
            raise serializers.ValidationError({'new_customer': 'A new customer can only be entered when creating an order.'})

        if new_customer:
            existing = Customer.objects.filter(shop=shop, phone=new_customer['phone']).first()
            if existing is not None:
                attrs.pop('new_customer')
                attrs['customer'] = existing
                return existing, existing.gender, existing.measurements
            return None, new_customer['gender'], new_customer['measurements']

        customer = attrs.get('customer') or instance.customer
        return customer, customer.gender, customer.measurements

    def validate(self, attrs):
        instance = self.instance
        customer, gender, customer_measurements = self._customer_for(attrs)

        price = attrs.get('price', instance.price if instance else None)
        amount_paid = attrs.get('amount_paid', instance.amount_paid if instance else Decimal('0'))
        if price is not None and amount_paid is not None and amount_paid > price:
            raise serializers.ValidationError({'amount_paid': 'Amount paid cannot exceed the price.'})

        garment_type = attrs.get('garment_type', instance.garment_type if instance else None)
        supplied = attrs.get('measurements')
        if supplied is not None and not isinstance(supplied, dict):
            raise serializers.ValidationError({'measurements': 'Measurements must be an object of field -> value.'})
        same_target = (
            instance is not None
            and garment_type == instance.garment_type
            and (customer is None or customer.pk == instance.customer_id)
        )
        if supplied is not None or not same_target:
            stored = instance.measurements if same_target else None
            try:
                attrs['measurements'] = merge_order_measurements(
                    gender, garment_type, customer_measurements, supplied, stored)
            except MeasurementError as exc:
                raise serializers.ValidationError({'measurements': str(exc)})
        return attrs

    def create(self, validated_data):
        new_customer = validated_data.pop('new_customer', None)
        if new_customer:
            validated_data['customer'] = Customer.objects.create(shop=validated_data['shop'], **new_customer)
        validated_data['customer_name'] = validated_data['customer'].full_name
        return super().create(validated_data)

    def update(self, instance, validated_data):
        customer = validated_data.get('customer')
        if customer is not None and customer.pk != instance.customer_id:
            validated_data['customer_name'] = customer.full_name
        return super().update(instance, validated_data)


class MaterialSerializer(serializers.ModelSerializer):
    class Meta:
        model = Material
        fields = ['id', 'order', 'name', 'quantity', 'unit_cost', 'total_cost', 'notes', 'created_at', 'updated_at']
        read_only_fields = ['order', 'total_cost', 'created_at', 'updated_at']

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Material name is required.')
        return value.strip()

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError('Quantity must be greater than zero.')
        return value

    def validate_unit_cost(self, value):
        if value < 0:
            raise serializers.ValidationError('Unit cost cannot be negative.')
        return value


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)


class StyleImageSerializer(serializers.Serializer):
    style_image = serializers.ImageField()

    def validate_style_image(self, value):
        return validate_image_size(value, settings.STYLE_IMAGE_MAX_BYTES)


class CustomMeasurementAddSerializer(serializers.Serializer):
    label = serializers.CharField(allow_blank=True, trim_whitespace=False)
    value = serializers.JSONField(required=False, allow_null=True)


class CustomMeasurementUpdateSerializer(serializers.Serializer):
    value = serializers.JSONField(required=False, allow_null=True)
