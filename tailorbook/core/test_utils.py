"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from tailorbook.customers.models import Customer
from tailorbook.expenses.models import Expense
from tailorbook.measurements.catalog import initialize_default_measurements, extract_order_measurements
from tailorbook.orders.models import Order, Material
from tailorbook.shops.models import Shop
from decimal import Decimal
from datetime import timedelta
from io import BytesIO
from PIL import Image
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def random_phone():
        return f'080{random.randint(10000000, 99999999)}'

    @staticmethod
    def create_user(username=None, email=None, password='Tailor-pass-123', is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_shop(owner=None, shop_name=None, owner_name='Ada Tailor', phone_number='08012345678'):
        """Create a test shop (and its owner if none given)"""
        if owner is None:
            owner = TestDataFactory.create_user()
        return Shop.objects.create(
            owner=owner,
            shop_name=shop_name or f'Shop_{TestDataFactory.random_string(6)}',
            owner_name=owner_name,
            phone_number=phone_number,
            address='12 Broad Street, Lagos',
        )

    @staticmethod
    def create_customer(shop, full_name=None, phone=None, gender='female', measurements=None):
        """Create a test customer; measurements are overlaid on the zero-filled set"""
        values = initialize_default_measurements(gender)
        values.update(measurements or {})
        return Customer.objects.create(
            shop=shop,
            full_name=full_name or f'Customer_{TestDataFactory.random_string(6)}',
            phone=phone or TestDataFactory.random_phone(),
            address='Test address',
            gender=gender,
            measurements=values,
        )

    @staticmethod
    def create_order(customer, garment_type=None, price=Decimal('20000.00'), amount_paid=Decimal('5000.00'),
                     status='pending', measurements=None, due_in_days=7, **extra):
        """Create a test order seeded from the customer's measurements"""
        if garment_type is None:
            garment_type = 'gown' if customer.gender == 'female' else 'kaftan'
        if measurements is None:
            measurements = extract_order_measurements(customer.measurements, customer.gender, garment_type)
        return Order.objects.create(
            shop=customer.shop,
            customer=customer,
            garment_type=garment_type,
            style_description=extra.pop('style_description', 'Off-shoulder with puff sleeves'),
            due_date=timezone.localdate() + timedelta(days=due_in_days),
            price=price,
            amount_paid=amount_paid,
            status=status,
            measurements=measurements,
            **extra
        )

    @staticmethod
    def create_material(order, name=None, quantity=Decimal('2.00'), unit_cost=Decimal('1500.00')):
        """Create a test material"""
        return Material.objects.create(
            order=order,
            name=name or f'Fabric_{TestDataFactory.random_string(4)}',
            quantity=quantity,
            unit_cost=unit_cost,
        )

    @staticmethod
    def create_expense(shop, item_name=None, category='tool', amount=Decimal('3000.00'), date=None):
        """Create a test expense"""
        return Expense.objects.create(
            shop=shop,
            item_name=item_name or f'Expense_{TestDataFactory.random_string(4)}',
            category=category,
            amount=amount,
            date=date or timezone.localdate(),
        )

    @staticmethod
    def create_image_file(name='style.png', size=(20, 20)):
        """A small in-memory PNG upload"""
        buffer = BytesIO()
        Image.new('RGB', size, color=(120, 30, 60)).save(buffer, format='PNG')
        return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/png')


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
