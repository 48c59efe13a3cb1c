"""
Test suite for the shop profile
"""
import shutil
import tempfile

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from rest_framework import status
from tailorbook.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from tailorbook.shops.models import Shop

MEDIA_ROOT = tempfile.mkdtemp()


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class ShopTests(TestCase):
    """Shop profile endpoints and the shop requirement"""

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.shop_data = {
            'shop_name': 'Stitch Perfect',
            'owner_name': 'Ada Obi',
            'phone_number': '+234 801 234 5678',
            'address': '4 Allen Avenue, Ikeja',
        }

    def test_get_without_shop(self):
        response = self.client.get('/api/v1/shop/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_create_shop(self):
        response = self.client.post('/api/v1/shop/', self.shop_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['shop_name'], 'Stitch Perfect')
        self.assertIsNone(response.data['logo_url'])
        self.assertEqual(Shop.objects.get().owner, self.user)

    def test_only_one_shop_per_account(self):
        TestDataFactory.create_shop(owner=self.user)
        response = self.client.post('/api/v1/shop/', self.shop_data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Shop.objects.filter(owner=self.user).count(), 1)

    def test_invalid_phone_number(self):
        for phone in ['12345', 'call me maybe', '080-12']:
            with self.subTest(phone=phone):
                data = dict(self.shop_data, phone_number=phone)
                response = self.client.post('/api/v1/shop/', data, format='json')
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertIn('phone_number', response.data)

    def test_blank_shop_name(self):
        response = self.client.post('/api/v1/shop/', dict(self.shop_data, shop_name='   '), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_shop(self):
        TestDataFactory.create_shop(owner=self.user)
        response = self.client.patch('/api/v1/shop/', {'address': 'New Address'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['address'], 'New Address')

    def test_upload_and_remove_logo(self):
        shop = TestDataFactory.create_shop(owner=self.user)
        response = self.client.post('/api/v1/shop/logo/', {'logo': TestDataFactory.create_image_file('logo.png')},
                                    format='multipart')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        shop.refresh_from_db()
        self.assertTrue(shop.logo.name.startswith(f'shops/{self.user.id}/logo/'))
        stored_name = shop.logo.name
        self.assertTrue(shop.logo.storage.exists(stored_name))

        response = self.client.delete('/api/v1/shop/logo/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        shop.refresh_from_db()
        self.assertFalse(shop.logo)
        self.assertFalse(shop.logo.storage.exists(stored_name))

    @override_settings(SHOP_LOGO_MAX_BYTES=100)
    def test_logo_too_large(self):
        TestDataFactory.create_shop(owner=self.user)
        response = self.client.post('/api/v1/shop/logo/', {'logo': TestDataFactory.create_image_file(size=(200, 200))},
                                    format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_logo_must_be_an_image(self):
        TestDataFactory.create_shop(owner=self.user)
        upload = SimpleUploadedFile('notes.txt', b'not an image', content_type='text/plain')
        response = self.client.post('/api/v1/shop/logo/', {'logo': upload}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_business_endpoints_require_a_shop(self):
        for url in ['/api/v1/customers/', '/api/v1/orders/', '/api/v1/expenses/', '/api/v1/reports/dashboard/']:
            with self.subTest(url=url):
                response = self.client.get(url)
                self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
