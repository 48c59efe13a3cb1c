"""
Test suite for the shop dashboard
"""
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from tailorbook.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from tailorbook.orders.models import Order
from datetime import timedelta
from decimal import Decimal


class DashboardTests(TestCase):
    """Dashboard totals, status counts and caching"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.shop = TestDataFactory.create_shop(owner=self.user)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer(self.shop)

    def test_empty_dashboard(self):
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['totals']['revenue'], 0.0)
        self.assertEqual(response.data['totals']['profit'], 0.0)
        self.assertEqual(response.data['total_customers'], 1)
        self.assertEqual(response.data['recent_orders'], [])
        self.assertEqual(response.data['shop']['shop_name'], self.shop.shop_name)

    def test_totals(self):
        first = TestDataFactory.create_order(self.customer, price=Decimal('30000'), amount_paid=Decimal('10000'))
        TestDataFactory.create_order(self.customer, price=Decimal('20000'), amount_paid=Decimal('20000'), status='delivered')
        TestDataFactory.create_material(first, quantity=Decimal('4'), unit_cost=Decimal('2000'))
        TestDataFactory.create_expense(self.shop, amount=Decimal('5000'))

        response = self.client.get('/api/v1/reports/dashboard/')
        totals = response.data['totals']
        self.assertEqual(totals['revenue'], 50000.0)
        self.assertEqual(totals['amount_paid'], 30000.0)
        self.assertEqual(totals['outstanding_balance'], 20000.0)
        self.assertEqual(totals['material_cost'], 8000.0)
        self.assertEqual(totals['expenses'], 5000.0)
        self.assertEqual(totals['profit'], 37000.0)
        self.assertEqual(response.data['order_status_counts']['pending'], 1)
        self.assertEqual(response.data['order_status_counts']['delivered'], 1)
        self.assertEqual(response.data['total_orders'], 2)

    def test_this_month_excludes_older_records(self):
        old = TestDataFactory.create_order(self.customer, price=Decimal('10000'), amount_paid=Decimal('0'))
        TestDataFactory.create_material(old, quantity=Decimal('1'), unit_cost=Decimal('1000'))
        last_month = timezone.now().replace(day=1) - timedelta(days=2)
        Order.objects.filter(pk=old.pk).update(created_at=last_month)
        TestDataFactory.create_expense(self.shop, amount=Decimal('700'), date=timezone.localdate().replace(day=1) - timedelta(days=2))
        TestDataFactory.create_order(self.customer, price=Decimal('15000'), amount_paid=Decimal('5000'))
        TestDataFactory.create_expense(self.shop, amount=Decimal('300'))

        response = self.client.get('/api/v1/reports/dashboard/')
        month = response.data['this_month']
        self.assertEqual(month['revenue'], 15000.0)
        self.assertEqual(month['material_cost'], 0.0)
        self.assertEqual(month['expenses'], 300.0)
        self.assertEqual(month['profit'], 14700.0)
        self.assertEqual(response.data['totals']['revenue'], 25000.0)

    def test_recent_orders_limited_to_five(self):
        for _ in range(7):
            TestDataFactory.create_order(self.customer)
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(len(response.data['recent_orders']), 5)

    def test_dashboard_is_cached_and_invalidated(self):
        TestDataFactory.create_order(self.customer, price=Decimal('10000'))
        first = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(first.data['totals']['revenue'], 10000.0)

        # Direct queryset updates skip signals, so the cached payload is served
        Order.objects.filter(shop=self.shop).update(price=Decimal('99999'))
        cached = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(cached.data['totals']['revenue'], 10000.0)

        TestDataFactory.create_order(self.customer, price=Decimal('5000'))
        fresh = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(fresh.data['totals']['revenue'], 104999.0)

    def test_dashboards_are_per_shop(self):
        TestDataFactory.create_order(self.customer, price=Decimal('10000'))
        self.client.get('/api/v1/reports/dashboard/')

        other_user = TestDataFactory.create_user()
        TestDataFactory.create_shop(owner=other_user)
        self.client.authenticate_user(other_user)
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.data['totals']['revenue'], 0.0)
