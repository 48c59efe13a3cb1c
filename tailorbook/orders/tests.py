"""
Comprehensive test suite for Orders module
Tests: Order CRUD, measurement editor, custom measurements, materials, style images, totals command
"""
import shutil
import tempfile
from datetime import timedelta
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from tailorbook.core.models import AuditLog
from tailorbook.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from tailorbook.customers.models import Customer
from tailorbook.orders.models import Order, Material

MEDIA_ROOT = tempfile.mkdtemp()

GOWN_MEASUREMENTS = {
    'bust': 36, 'waist': 28, 'hip': 40, 'shoulder': 15,
    'gownLength': 58, 'sleeveLength': 22, 'backLength': 16,
}


class OrderTestCase(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.shop = TestDataFactory.create_shop(owner=self.user)
        self.customer = TestDataFactory.create_customer(self.shop, gender='female', measurements=GOWN_MEASUREMENTS)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.due_date = (timezone.localdate() + timedelta(days=10)).isoformat()

    def order_payload(self, **overrides):
        data = {
            'customer': self.customer.id,
            'garment_type': 'gown',
            'style_description': 'Mermaid gown with lace sleeves',
            'due_date': self.due_date,
            'price': '45000.00',
            'amount_paid': '20000.00',
        }
        data.update(overrides)
        return data


class OrderCreateTests(OrderTestCase):
    """Order creation and validation"""

    def test_create_seeds_measurements_from_customer(self):
        response = self.client.post('/api/v1/orders/', self.order_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['measurements'], GOWN_MEASUREMENTS)
        self.assertEqual(response.data['customer_name'], self.customer.full_name)
        self.assertEqual(Decimal(response.data['balance']), Decimal('25000.00'))
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['garment_label'], 'Gown')

    def test_create_merges_supplied_measurements(self):
        response = self.client.post('/api/v1/orders/', self.order_payload(
            measurements={'waist': 30, 'neck': 14},
        ), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        expected = dict(GOWN_MEASUREMENTS, waist=30)
        self.assertEqual(response.data['measurements'], expected)

    def test_create_rejects_invalid_measurement(self):
        response = self.client.post('/api/v1/orders/', self.order_payload(measurements={'waist': 'slim'}), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('measurements', response.data)

    def test_create_with_new_customer(self):
        payload = self.order_payload(new_customer={
            'full_name': 'Emeka Obi',
            'phone': '08099887766',
            'address': 'Yaba',
            'gender': 'male',
            'measurements': {'shoulder': 18, 'chest': 42},
        }, garment_type='kaftan')
        payload.pop('customer')
        response = self.client.post('/api/v1/orders/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        customer = Customer.objects.get(phone='08099887766')
        self.assertEqual(customer.shop, self.shop)
        self.assertEqual(response.data['customer'], customer.id)
        self.assertEqual(response.data['measurements'], {'shoulder': 18, 'chest': 42, 'sleeveLength': 0, 'topLength': 0})

    def test_new_customer_with_known_phone_reuses_record(self):
        payload = self.order_payload(new_customer={
            'full_name': 'Typo Name',
            'phone': self.customer.phone,
            'gender': 'female',
        })
        payload.pop('customer')
        response = self.client.post('/api/v1/orders/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['customer'], self.customer.id)
        self.assertEqual(Customer.objects.filter(shop=self.shop).count(), 1)
        self.assertEqual(response.data['measurements'], GOWN_MEASUREMENTS)

    def test_customer_or_new_customer_required(self):
        payload = self.order_payload()
        payload.pop('customer')
        response = self.client.post('/api/v1/orders/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_customer_from_another_shop_rejected(self):
        stranger = TestDataFactory.create_customer(TestDataFactory.create_shop())
        response = self.client.post('/api/v1/orders/', self.order_payload(customer=stranger.id), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('customer', response.data)

    def test_money_validation(self):
        cases = [
            {'price': '0'},
            {'price': '-10'},
            {'amount_paid': '-1'},
            {'price': '1000', 'amount_paid': '1500'},
        ]
        for overrides in cases:
            with self.subTest(overrides=overrides):
                response = self.client.post('/api/v1/orders/', self.order_payload(**overrides), format='json')
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_due_date_cannot_be_in_the_past(self):
        yesterday = (timezone.localdate() - timedelta(days=1)).isoformat()
        response = self.client.post('/api/v1/orders/', self.order_payload(due_date=yesterday), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('due_date', response.data)

    def test_style_description_required(self):
        response = self.client.post('/api/v1/orders/', self.order_payload(style_description='  '), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_garment_has_no_measurements(self):
        response = self.client.post('/api/v1/orders/', self.order_payload(garment_type='cape'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['measurements'], {})

    def test_create_with_custom_measurements(self):
        response = self.client.post('/api/v1/orders/', self.order_payload(custom_measurements={
            'x': {'label': 'Sleeve Slant', 'value': '2'},
        }), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['custom_measurements'], {'sleeve_slant': {'label': 'Sleeve Slant', 'value': 2.0}})

    def test_create_is_audited(self):
        response = self.client.post('/api/v1/orders/', self.order_payload(), format='json')
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Order',
                                                object_id=str(response.data['id'])).exists())


class OrderUpdateListTests(OrderTestCase):
    """Order updates, listing and detail"""

    def test_update_recomputes_balance(self):
        order = TestDataFactory.create_order(self.customer, price=Decimal('20000'), amount_paid=Decimal('5000'))
        response = self.client.patch(f'/api/v1/orders/{order.id}/', {'amount_paid': '15000'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        order.refresh_from_db()
        self.assertEqual(order.balance, Decimal('5000.00'))

    def test_update_paid_above_existing_price_rejected(self):
        order = TestDataFactory.create_order(self.customer, price=Decimal('20000'), amount_paid=Decimal('5000'))
        response = self.client.patch(f'/api/v1/orders/{order.id}/', {'amount_paid': '25000'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_garment_change_reseeds_measurements(self):
        order = TestDataFactory.create_order(self.customer, garment_type='gown', measurements=dict(GOWN_MEASUREMENTS, waist=30))
        response = self.client.patch(f'/api/v1/orders/{order.id}/', {'garment_type': 'boubou'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        order.refresh_from_db()
        self.assertEqual(order.measurements, {'bust': 36, 'shoulder': 15, 'sleeveLength': 22, 'gownLength': 58})

    def test_unrelated_update_keeps_edits(self):
        order = TestDataFactory.create_order(self.customer, measurements=dict(GOWN_MEASUREMENTS, waist=30))
        response = self.client.patch(f'/api/v1/orders/{order.id}/', {'notes': 'Rush job'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        order.refresh_from_db()
        self.assertEqual(order.measurements['waist'], 30)

    def test_measurement_patch_keeps_other_edits(self):
        order = TestDataFactory.create_order(self.customer, measurements=dict(GOWN_MEASUREMENTS, bust=38))
        response = self.client.patch(f'/api/v1/orders/{order.id}/', {'measurements': {'waist': 30}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        order.refresh_from_db()
        self.assertEqual(order.measurements['bust'], 38)
        self.assertEqual(order.measurements['waist'], 30)
        self.assertEqual(order.measurements['hip'], 40)

    def test_empty_measurement_patch_keeps_edits(self):
        order = TestDataFactory.create_order(self.customer, measurements=dict(GOWN_MEASUREMENTS, bust=38))
        response = self.client.patch(f'/api/v1/orders/{order.id}/', {'measurements': {}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        order.refresh_from_db()
        self.assertEqual(order.measurements['bust'], 38)

    def test_past_due_date_allowed_on_update(self):
        order = TestDataFactory.create_order(self.customer)
        last_week = (timezone.localdate() - timedelta(days=7)).isoformat()
        response = self.client.patch(f'/api/v1/orders/{order.id}/', {'due_date': last_week}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_status_change(self):
        order = TestDataFactory.create_order(self.customer)
        response = self.client.post(f'/api/v1/orders/{order.id}/status/', {'status': 'in-progress'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        order.refresh_from_db()
        self.assertEqual(order.status, 'in-progress')
        self.assertTrue(AuditLog.objects.filter(action='status_change', object_id=str(order.id)).exists())

        response = self.client.post(f'/api/v1/orders/{order.id}/status/', {'status': 'lost'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_with_filters_and_status_counts(self):
        TestDataFactory.create_order(self.customer, status='pending', style_description='Lace gown')
        TestDataFactory.create_order(self.customer, status='completed')
        male = TestDataFactory.create_customer(self.shop, gender='male', full_name='Musa Bello')
        TestDataFactory.create_order(male, status='completed')

        response = self.client.get('/api/v1/orders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(response.data['status_counts']['completed'], 2)
        self.assertEqual(response.data['status_counts']['pending'], 1)
        self.assertEqual(response.data['status_counts']['delivered'], 0)
        self.assertEqual(response.data['status_counts']['all'], 3)

        response = self.client.get('/api/v1/orders/?status=completed')
        self.assertEqual(response.data['count'], 2)

        response = self.client.get(f'/api/v1/orders/?customer={male.id}')
        self.assertEqual(response.data['count'], 1)

        response = self.client.get('/api/v1/orders/?search=lace')
        self.assertEqual(response.data['count'], 1)

        response = self.client.get('/api/v1/orders/?search=musa')
        self.assertEqual(response.data['results'][0]['customer_name'], 'Musa Bello')

    def test_other_shops_orders_are_invisible(self):
        stranger = TestDataFactory.create_order(TestDataFactory.create_customer(TestDataFactory.create_shop()))
        self.assertEqual(self.client.get(f'/api/v1/orders/{stranger.id}/').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.get('/api/v1/orders/').data['count'], 0)

    def test_detail_includes_materials_and_profit(self):
        order = TestDataFactory.create_order(self.customer, price=Decimal('20000'))
        TestDataFactory.create_material(order, quantity=Decimal('3'), unit_cost=Decimal('1500'))
        TestDataFactory.create_material(order, quantity=Decimal('1'), unit_cost=Decimal('500'))
        response = self.client.get(f'/api/v1/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['materials']), 2)
        self.assertEqual(response.data['total_material_cost'], 5000.0)
        self.assertEqual(response.data['net_profit'], 15000.0)

    def test_delete_removes_materials(self):
        order = TestDataFactory.create_order(self.customer)
        TestDataFactory.create_material(order)
        response = self.client.delete(f'/api/v1/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Order.objects.filter(pk=order.id).exists())
        self.assertEqual(Material.objects.count(), 0)
        self.assertTrue(Customer.objects.filter(pk=self.customer.id).exists())


class OrderMeasurementEditorTests(OrderTestCase):
    """Per-order overrides of the customer's defaults"""

    def setUp(self):
        super().setUp()
        self.order = TestDataFactory.create_order(self.customer, garment_type='gown')
        self.url = f'/api/v1/orders/{self.order.id}/measurements/'

    def fields(self, response):
        return {field['key']: field for field in response.data['fields']}

    def test_get_resolved_view(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['state'], 'ready')
        self.assertEqual([field['key'] for field in response.data['fields']],
                         ['bust', 'waist', 'hip', 'shoulder', 'gownLength', 'sleeveLength', 'backLength'])
        self.assertEqual(self.fields(response)['bust']['label'], 'Bust')
        self.assertEqual({field['provenance'] for field in response.data['fields']}, {'default'})
        self.assertFalse(response.data['has_missing_customer_measurements'])

    def test_edit_then_revert_value(self):
        response = self.client.post(f'{self.url}edit/', {'field': 'bust', 'value': 38}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.fields(response)['bust']['provenance'], 'edited')
        self.assertEqual(self.fields(response)['bust']['value'], 38)
        self.order.refresh_from_db()
        self.assertEqual(self.order.measurements, dict(GOWN_MEASUREMENTS, bust=38))

        response = self.client.post(f'{self.url}edit/', {'field': 'bust', 'value': '36'}, format='json')
        self.assertEqual(self.fields(response)['bust']['provenance'], 'default')

    def test_edit_invalid_value(self):
        response = self.client.post(f'{self.url}edit/', {'field': 'bust', 'value': 'NaN'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)
        self.order.refresh_from_db()
        self.assertEqual(self.order.measurements['bust'], 36)

    def test_edit_field_the_garment_does_not_need(self):
        response = self.client.post(f'{self.url}edit/', {'field': 'inseam', 'value': 30}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reset_all_without_requirements_keeps_stored_values(self):
        self.order.measurements = dict(GOWN_MEASUREMENTS, bust=38)
        self.order.save()
        Customer.objects.filter(pk=self.customer.pk).update(gender='male')

        response = self.client.post(f'{self.url}reset-all/', format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['state'], 'no_requirements')
        self.order.refresh_from_db()
        self.assertEqual(self.order.measurements['bust'], 38)
        self.assertFalse(AuditLog.objects.filter(action='measurement_reset', object_id=str(self.order.id)).exists())

    def test_bulk_update(self):
        response = self.client.put(self.url, {'measurements': {'waist': 30, 'hip': 41}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        edited = [key for key, field in self.fields(response).items() if field['provenance'] == 'edited']
        self.assertEqual(edited, ['waist', 'hip'])

    def test_reset_one_field(self):
        self.client.post(f'{self.url}edit/', {'field': 'waist', 'value': 30}, format='json')
        response = self.client.post(f'{self.url}reset/', {'field': 'waist'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self.fields(response)['waist']['value'], 28)
        self.assertEqual(self.fields(response)['waist']['provenance'], 'default')

    def test_reset_all(self):
        self.client.post(f'{self.url}edit/', {'field': 'waist', 'value': 30}, format='json')
        self.client.post(f'{self.url}edit/', {'field': 'bust', 'value': 39}, format='json')
        response = self.client.post(f'{self.url}reset-all/', format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.order.refresh_from_db()
        self.assertEqual(self.order.measurements, GOWN_MEASUREMENTS)
        self.assertTrue(AuditLog.objects.filter(action='measurement_reset', object_id=str(self.order.id)).exists())

    def test_customer_default_change_shows_through_unedited_fields(self):
        self.client.post(f'{self.url}edit/', {'field': 'waist', 'value': 30}, format='json')
        self.customer.measurements = dict(self.customer.measurements, waist=30)
        self.customer.save()
        response = self.client.get(self.url)
        self.assertEqual(self.fields(response)['waist']['provenance'], 'default')

    def test_missing_customer_measurements_warning(self):
        bare = TestDataFactory.create_customer(self.shop, gender='male', measurements={'shoulder': 18})
        order = TestDataFactory.create_order(bare, garment_type='kaftan')
        response = self.client.get(f'/api/v1/orders/{order.id}/measurements/')
        self.assertTrue(response.data['has_missing_customer_measurements'])
        self.assertEqual(response.data['missing_fields'], ['chest', 'sleeveLength', 'topLength'])

    def test_unknown_garment_state(self):
        order = TestDataFactory.create_order(self.customer, garment_type='cape')
        response = self.client.get(f'/api/v1/orders/{order.id}/measurements/')
        self.assertEqual(response.data['state'], 'no_requirements')
        self.assertEqual(response.data['fields'], [])


class CustomMeasurementTests(OrderTestCase):
    """Freeform measurements on an order"""

    def setUp(self):
        super().setUp()
        self.order = TestDataFactory.create_order(self.customer)
        self.url = f'/api/v1/orders/{self.order.id}/custom-measurements/'

    def test_add_update_remove(self):
        response = self.client.post(self.url, {'label': 'Sleeve Slant', 'value': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['key'], 'sleeve_slant')

        response = self.client.patch(f'{self.url}sleeve_slant/', {'value': '2.5'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['sleeve_slant'], {'label': 'Sleeve Slant', 'value': 2.5})

        response = self.client.delete(f'{self.url}sleeve_slant/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.order.refresh_from_db()
        self.assertEqual(self.order.custom_measurements, {})

    def test_colliding_labels_overwrite(self):
        self.client.post(self.url, {'label': 'Sleeve Slant', 'value': 2}, format='json')
        self.client.post(self.url, {'label': 'sleeve  slant', 'value': 3}, format='json')
        response = self.client.get(self.url)
        self.assertEqual(response.data, {'sleeve_slant': {'label': 'sleeve  slant', 'value': 3}})

    def test_blank_label_rejected(self):
        response = self.client.post(self.url, {'label': '  ', 'value': 2}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_unknown_key(self):
        response = self.client.patch(f'{self.url}missing/', {'value': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_remove_unknown_key_is_noop(self):
        response = self.client.delete(f'{self.url}missing/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)


class MaterialTests(OrderTestCase):
    """Materials bought for an order"""

    def setUp(self):
        super().setUp()
        self.order = TestDataFactory.create_order(self.customer)
        self.url = f'/api/v1/orders/{self.order.id}/materials/'

    def test_create_computes_total(self):
        response = self.client.post(self.url, {'name': 'Ankara', 'quantity': '6', 'unit_cost': '2500'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['total_cost']), Decimal('15000.00'))

    def test_list_with_total(self):
        TestDataFactory.create_material(self.order, quantity=Decimal('2'), unit_cost=Decimal('1000'))
        TestDataFactory.create_material(self.order, quantity=Decimal('1.5'), unit_cost=Decimal('400'))
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['results']), 2)
        self.assertEqual(response.data['total_material_cost'], 2600.0)

    def test_update_recomputes_total(self):
        material = TestDataFactory.create_material(self.order, quantity=Decimal('2'), unit_cost=Decimal('1000'))
        response = self.client.patch(f'{self.url}{material.id}/', {'quantity': '3'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        material.refresh_from_db()
        self.assertEqual(material.total_cost, Decimal('3000.00'))

    def test_validation(self):
        for data in [{'name': '', 'quantity': '1', 'unit_cost': '1'},
                     {'name': 'Lace', 'quantity': '0', 'unit_cost': '1'},
                     {'name': 'Lace', 'quantity': '1', 'unit_cost': '-1'}]:
            with self.subTest(data=data):
                response = self.client.post(self.url, data, format='json')
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete(self):
        material = TestDataFactory.create_material(self.order)
        response = self.client.delete(f'{self.url}{material.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Material.objects.filter(pk=material.id).exists())

    def test_material_of_another_order_is_invisible(self):
        other_order = TestDataFactory.create_order(self.customer)
        material = TestDataFactory.create_material(other_order)
        response = self.client.get(f'{self.url}{material.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class StyleImageTests(OrderTestCase):
    """Style reference image upload and cleanup"""

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        super().setUp()
        self.order = TestDataFactory.create_order(self.customer)
        self.url = f'/api/v1/orders/{self.order.id}/style-image/'

    def upload(self, name='style.png'):
        return self.client.post(self.url, {'style_image': TestDataFactory.create_image_file(name)}, format='multipart')

    def test_upload_and_replace(self):
        response = self.upload()
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['style_image_url'])
        self.order.refresh_from_db()
        first_name = self.order.style_image.name
        storage = self.order.style_image.storage

        self.upload('style-v2.png')
        self.order.refresh_from_db()
        self.assertFalse(storage.exists(first_name))
        self.assertTrue(storage.exists(self.order.style_image.name))

    def test_remove(self):
        self.upload()
        self.order.refresh_from_db()
        name = self.order.style_image.name
        storage = self.order.style_image.storage
        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(storage.exists(name))

    def test_order_delete_removes_image(self):
        self.upload()
        self.order.refresh_from_db()
        name = self.order.style_image.name
        storage = self.order.style_image.storage
        self.client.delete(f'/api/v1/orders/{self.order.id}/')
        self.assertFalse(storage.exists(name))

    def test_customer_delete_removes_image(self):
        self.upload()
        self.order.refresh_from_db()
        name = self.order.style_image.name
        storage = self.order.style_image.storage
        self.client.delete(f'/api/v1/customers/{self.customer.id}/')
        self.assertFalse(storage.exists(name))

    @override_settings(STYLE_IMAGE_MAX_BYTES=100)
    def test_image_too_large(self):
        response = self.client.post(self.url, {'style_image': TestDataFactory.create_image_file(size=(200, 200))},
                                    format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class RecalculateOrderTotalsCommandTests(TestCase):
    """recalculate_order_totals management command"""

    def setUp(self):
        self.shop = TestDataFactory.create_shop()
        self.order = TestDataFactory.create_order(TestDataFactory.create_customer(self.shop),
                                                  price=Decimal('10000'), amount_paid=Decimal('4000'))
        self.material = TestDataFactory.create_material(self.order, quantity=Decimal('2'), unit_cost=Decimal('750'))
        # Simulate drifted rows imported from elsewhere
        Order.objects.filter(pk=self.order.pk).update(balance=Decimal('1.00'))
        Material.objects.filter(pk=self.material.pk).update(total_cost=Decimal('9.00'))

    def test_dry_run_changes_nothing(self):
        out = StringIO()
        call_command('recalculate_order_totals', '--dry-run', stdout=out)
        self.order.refresh_from_db()
        self.material.refresh_from_db()
        self.assertEqual(self.order.balance, Decimal('1.00'))
        self.assertEqual(self.material.total_cost, Decimal('9.00'))
        self.assertIn('1 orders and 1 materials would be updated', out.getvalue())

    def test_repairs_totals(self):
        call_command('recalculate_order_totals', stdout=StringIO())
        self.order.refresh_from_db()
        self.material.refresh_from_db()
        self.assertEqual(self.order.balance, Decimal('6000.00'))
        self.assertEqual(self.material.total_cost, Decimal('1500.00'))
