"""
Test suite for customers and their default measurements
"""
from django.test import TestCase
from rest_framework import status
from tailorbook.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from tailorbook.customers.models import Customer
from tailorbook.measurements.catalog import initialize_default_measurements
from tailorbook.orders.models import Order, Material
from decimal import Decimal


class CustomerTests(TestCase):
    """Customer CRUD"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.shop = TestDataFactory.create_shop(owner=self.user)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_customer_initialises_measurements(self):
        response = self.client.post('/api/v1/customers/', {
            'full_name': 'Chioma Eze',
            'phone': '08031234567',
            'gender': 'female',
            'measurements': {'bust': 36, 'waist': '28.5'},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        measurements = response.data['measurements']
        self.assertEqual(set(measurements), set(initialize_default_measurements('female')))
        self.assertEqual(measurements['bust'], 36)
        self.assertEqual(measurements['waist'], 28.5)
        self.assertEqual(measurements['hip'], 0)

    def test_create_customer_without_measurements(self):
        response = self.client.post('/api/v1/customers/', {
            'full_name': 'Tunde Bello',
            'phone': '08031234568',
            'gender': 'male',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['measurements'], initialize_default_measurements('male'))

    def test_gender_is_required(self):
        response = self.client.post('/api/v1/customers/', {'full_name': 'No Gender', 'phone': '08031234569'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('gender', response.data)

    def test_measurement_keys_must_match_gender(self):
        response = self.client.post('/api/v1/customers/', {
            'full_name': 'Tunde Bello',
            'phone': '08031234568',
            'gender': 'male',
            'measurements': {'bust': 36},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('measurements', response.data)

    def test_invalid_measurement_value(self):
        response = self.client.post('/api/v1/customers/', {
            'full_name': 'Tunde Bello',
            'phone': '08031234568',
            'gender': 'male',
            'measurements': {'chest': 'broad'},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_phone_unique_within_shop(self):
        TestDataFactory.create_customer(self.shop, phone='08031234567')
        response = self.client.post('/api/v1/customers/', {
            'full_name': 'Another', 'phone': '08031234567', 'gender': 'female',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('phone', response.data)

    def test_same_phone_allowed_in_another_shop(self):
        other_shop = TestDataFactory.create_shop()
        TestDataFactory.create_customer(other_shop, phone='08031234567')
        response = self.client.post('/api/v1/customers/', {
            'full_name': 'Another', 'phone': '08031234567', 'gender': 'female',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_list_search_and_gender_filter(self):
        TestDataFactory.create_customer(self.shop, full_name='Ngozi Ade', gender='female')
        TestDataFactory.create_customer(self.shop, full_name='Musa Ade', gender='male')
        TestDataFactory.create_customer(self.shop, full_name='Femi Cole', gender='male')
        TestDataFactory.create_customer(TestDataFactory.create_shop(), full_name='Kemi Ade')

        response = self.client.get('/api/v1/customers/?search=ade')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

        response = self.client.get('/api/v1/customers/?gender=male')
        self.assertEqual({c['full_name'] for c in response.data}, {'Musa Ade', 'Femi Cole'})

        response = self.client.get('/api/v1/customers/?search=ade&gender=male')
        self.assertEqual([c['full_name'] for c in response.data], ['Musa Ade'])

    def test_other_shops_customers_are_invisible(self):
        stranger = TestDataFactory.create_customer(TestDataFactory.create_shop())
        response = self.client.get(f'/api/v1/customers/{stranger.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_detail_includes_orders_and_totals(self):
        customer = TestDataFactory.create_customer(self.shop)
        TestDataFactory.create_order(customer, price=Decimal('20000'), amount_paid=Decimal('5000'))
        TestDataFactory.create_order(customer, price=Decimal('10000'), amount_paid=Decimal('10000'))
        response = self.client.get(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['orders']), 2)
        self.assertEqual(response.data['totals'], {
            'orders': 2,
            'total_billed': 30000.0,
            'total_paid': 15000.0,
            'outstanding_balance': 15000.0,
        })

    def test_update_keeps_measurements_when_gender_unchanged(self):
        customer = TestDataFactory.create_customer(self.shop, gender='female', measurements={'bust': 36})
        response = self.client.patch(f'/api/v1/customers/{customer.id}/', {'address': 'New place'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        customer.refresh_from_db()
        self.assertEqual(customer.measurements['bust'], 36)

    def test_gender_change_resets_measurements(self):
        customer = TestDataFactory.create_customer(self.shop, gender='female', measurements={'bust': 36, 'waist': 28})
        response = self.client.patch(f'/api/v1/customers/{customer.id}/', {
            'gender': 'male',
            'measurements': {'chest': 40},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        customer.refresh_from_db()
        expected = initialize_default_measurements('male')
        expected['chest'] = 40
        self.assertEqual(customer.measurements, expected)

    def test_delete_cascades_to_orders_and_materials(self):
        customer = TestDataFactory.create_customer(self.shop)
        order = TestDataFactory.create_order(customer)
        TestDataFactory.create_material(order)
        response = self.client.delete(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Customer.objects.filter(pk=customer.id).exists())
        self.assertFalse(Order.objects.filter(pk=order.id).exists())
        self.assertEqual(Material.objects.count(), 0)


class CustomerMeasurementTests(TestCase):
    """Customer default measurement endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.shop = TestDataFactory.create_shop(owner=self.user)
        self.customer = TestDataFactory.create_customer(self.shop, gender='male', measurements={'chest': 40, 'waist': 34})
        self.url = f'/api/v1/customers/{self.customer.id}/measurements/'
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_get_with_labels(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        fields = {field['key']: field for field in response.data['fields']}
        self.assertEqual(fields['chest']['label'], 'Chest / Body')
        self.assertEqual(fields['chest']['value'], 40)
        self.assertEqual(fields['chest']['unit'], 'inches')
        self.assertEqual(len(response.data['fields']), 12)

    def test_patch_touches_only_supplied_fields(self):
        response = self.client.patch(self.url, {'measurements': {'neck': '15.5'}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.measurements['neck'], 15.5)
        self.assertEqual(self.customer.measurements['chest'], 40)

    def test_put_replaces_the_set(self):
        response = self.client.put(self.url, {'measurements': {'neck': 15}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.measurements['neck'], 15)
        self.assertEqual(self.customer.measurements['chest'], 0)

    def test_blank_value_means_zero(self):
        response = self.client.patch(self.url, {'measurements': {'chest': ''}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.measurements['chest'], 0)

    def test_invalid_values_rejected(self):
        for value in ['wide', -3]:
            with self.subTest(value=value):
                response = self.client.patch(self.url, {'measurements': {'chest': value}}, format='json')
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertIn('measurements', response.data)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.measurements['chest'], 40)

    def test_unknown_field_rejected(self):
        response = self.client.patch(self.url, {'measurements': {'bust': 30}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_customer_orders(self):
        TestDataFactory.create_order(self.customer)
        response = self.client.get(f'/api/v1/customers/{self.customer.id}/orders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['garment_label'], 'Kaftan')
