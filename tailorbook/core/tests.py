"""
Test suite for accounts, audit logging and dashboard cache invalidation
"""
from django.core.cache import cache
from django.test import TestCase, RequestFactory
from rest_framework import status
from tailorbook.core.cache_signals import dashboard_cache_key, suspend_cache_signals
from tailorbook.core.models import AuditLog
from tailorbook.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from tailorbook.core.utils import create_audit_log, get_client_ip, json_safe
from decimal import Decimal
import datetime


class AuthTests(TestCase):
    """Registration, login, refresh and current user"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_register(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'ada',
            'email': 'ada@example.com',
            'password': 'Needle-and-thread-9',
            'password_confirm': 'Needle-and-thread-9',
            'phone': '08012345678',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertFalse(response.data['user']['has_shop'])

    def test_register_password_mismatch(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'ada',
            'password': 'Needle-and-thread-9',
            'password_confirm': 'something-else-9',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_login_and_refresh(self):
        user = TestDataFactory.create_user(username='bola', password='Needle-and-thread-9')
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'bola',
            'password': 'Needle-and-thread-9',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['id'], user.id)

        refresh = self.client.post('/api/v1/auth/refresh/', {'refresh': response.data['refresh']}, format='json')
        self.assertEqual(refresh.status_code, status.HTTP_200_OK)
        self.assertIn('access', refresh.data)

    def test_login_wrong_password(self):
        TestDataFactory.create_user(username='bola')
        response = self.client.post('/api/v1/auth/login/', {'username': 'bola', 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh_with_garbage_token(self):
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': 'not-a-token'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me(self):
        user = TestDataFactory.create_user()
        TestDataFactory.create_shop(owner=user)
        self.client.authenticate_user(user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], user.username)
        self.assertTrue(response.data['has_shop'])

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class AuditLogTests(TestCase):
    """Audit helper and admin-only endpoints"""

    def setUp(self):
        self.factory = RequestFactory()
        self.user = TestDataFactory.create_user()

    def test_get_client_ip_prefers_forwarded_header(self):
        request = self.factory.get('/', HTTP_X_FORWARDED_FOR='10.0.0.1, 10.0.0.2')
        self.assertEqual(get_client_ip(request), '10.0.0.1')
        self.assertIsNone(get_client_ip(None))

    def test_create_audit_log(self):
        request = self.factory.get('/')
        request.user = self.user
        log = create_audit_log(request, 'create', 'Customer', 5, {'full_name': 'Ada'}, object_name='Ada')
        self.assertIsNotNone(log)
        self.assertEqual(log.user, self.user)
        self.assertEqual(log.object_id, '5')

    def test_create_audit_log_skips_incomplete_entries(self):
        self.assertIsNone(create_audit_log(None, None, 'Customer', 1))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_json_safe(self):
        value = json_safe({'price': Decimal('10.50'), 'due': datetime.date(2025, 1, 2), 'items': [Decimal('1')]})
        self.assertEqual(value, {'price': '10.50', 'due': '2025-01-02', 'items': ['1']})

    def test_audit_log_endpoints_are_admin_only(self):
        client = AuthenticatedAPIClient()
        client.authenticate_user(self.user)
        self.assertEqual(client.get('/api/v1/audit-logs/').status_code, status.HTTP_403_FORBIDDEN)

        admin = TestDataFactory.create_user(is_staff=True)
        create_audit_log(None, 'delete', 'Expense', 3, user=admin, object_name='Scissors')
        client.authenticate_user(admin)
        response = client.get('/api/v1/audit-logs/?model_name=Expense')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        detail = client.get(f"/api/v1/audit-logs/{response.data[0]['id']}/")
        self.assertEqual(detail.data['object_name'], 'Scissors')


class DashboardCacheSignalTests(TestCase):
    """Dashboard cache entries are dropped when shop data changes"""

    def setUp(self):
        cache.clear()
        self.shop = TestDataFactory.create_shop()
        self.key = dashboard_cache_key(self.shop.id)

    def test_order_save_invalidates(self):
        customer = TestDataFactory.create_customer(self.shop)
        cache.set(self.key, {'stale': True})
        TestDataFactory.create_order(customer)
        self.assertIsNone(cache.get(self.key))

    def test_material_and_expense_changes_invalidate(self):
        order = TestDataFactory.create_order(TestDataFactory.create_customer(self.shop))
        cache.set(self.key, {'stale': True})
        material = TestDataFactory.create_material(order)
        self.assertIsNone(cache.get(self.key))

        cache.set(self.key, {'stale': True})
        material.delete()
        self.assertIsNone(cache.get(self.key))

        cache.set(self.key, {'stale': True})
        TestDataFactory.create_expense(self.shop)
        self.assertIsNone(cache.get(self.key))

    def test_other_shops_are_untouched(self):
        other = TestDataFactory.create_shop()
        other_key = dashboard_cache_key(other.id)
        cache.set(other_key, {'cached': True})
        TestDataFactory.create_expense(self.shop)
        self.assertEqual(cache.get(other_key), {'cached': True})

    def test_suspended_signals_leave_cache_alone(self):
        cache.set(self.key, {'cached': True})
        with suspend_cache_signals():
            TestDataFactory.create_expense(self.shop)
        self.assertEqual(cache.get(self.key), {'cached': True})
