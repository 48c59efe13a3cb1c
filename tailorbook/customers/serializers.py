from rest_framework import serializers

from tailorbook.measurements.serializers import clean_measurement_set, labelled_measurements
from .models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    """
    Customer with its measurement set.

    The shop comes from context['shop']. On create the set starts zero-filled
    for the gender; changing gender throws the old set away. Supplied values are
    overlaid on whichever set applies.
    """
    measurements = serializers.JSONField(required=False)
    order_count = serializers.SerializerMethodField()

    class Meta:
        model = Customer
        fields = ['id', 'full_name', 'phone', 'address', 'gender', 'measurements', 'order_count',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_order_count(self, obj):
        count = getattr(obj, 'order_count', None)
        return count if count is not None else obj.orders.count()

    def validate_full_name(self, value):
        if not value.strip():
            raise serializers.ValidationError('Full name is required.')
        return value.strip()

    def validate_phone(self, value):
        value = value.strip()
        shop = self.context.get('shop') or (self.instance.shop if self.instance else None)
        if shop is not None:
            duplicates = Customer.objects.filter(shop=shop, phone=value)
            if self.instance is not None:
                duplicates = duplicates.exclude(pk=self.instance.pk)
            if duplicates.exists():
                raise serializers.ValidationError('A customer with this phone number already exists.')
        return value

    def validate(self, attrs):
        instance = self.instance
        gender = attrs.get('gender', instance.gender if instance else None)
        gender_changed = instance is None or gender != instance.gender
        supplied = attrs.get('measurements')

        if gender_changed or supplied is not None:
            base = None if gender_changed else instance.measurements
            try:
                attrs['measurements'] = clean_measurement_set(gender, supplied, base)
            except serializers.ValidationError as exc:
                raise serializers.ValidationError({'measurements': exc.detail})
        return attrs


class CustomerMeasurementsSerializer(serializers.Serializer):
    measurements = serializers.JSONField()


def customer_measurements_payload(customer):
    return {
        'customer': customer.id,
        'gender': customer.gender,
        'measurements': customer.measurements,
        'fields': labelled_measurements(customer.gender, customer.measurements),
    }
