"""
Test suite for shop expenses
"""
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from tailorbook.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from tailorbook.expenses.models import Expense
from datetime import timedelta
from decimal import Decimal


class ExpenseTests(TestCase):
    """Expense CRUD, filters and summary"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.shop = TestDataFactory.create_shop(owner=self.user)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.today = timezone.localdate()

    def test_create_expense(self):
        response = self.client.post('/api/v1/expenses/', {
            'item_name': 'Industrial sewing machine',
            'category': 'equipment',
            'amount': '185000.00',
            'date': self.today.isoformat(),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['category_display'], 'Equipment')
        self.assertEqual(Expense.objects.get().shop, self.shop)

    def test_amount_must_be_positive(self):
        for amount in ['0', '-50']:
            with self.subTest(amount=amount):
                response = self.client.post('/api/v1/expenses/', {
                    'item_name': 'Thread', 'category': 'material', 'amount': amount, 'date': self.today.isoformat(),
                }, format='json')
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_invalid_category(self):
        response = self.client.post('/api/v1/expenses/', {
            'item_name': 'Thread', 'category': 'snacks', 'amount': '100', 'date': self.today.isoformat(),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_newest_first_with_filters(self):
        TestDataFactory.create_expense(self.shop, item_name='Scissors', category='tool', date=self.today - timedelta(days=3))
        TestDataFactory.create_expense(self.shop, item_name='Shop rent', category='rent', date=self.today)
        TestDataFactory.create_expense(self.shop, item_name='Tape measure', category='tool', date=self.today - timedelta(days=1))
        TestDataFactory.create_expense(TestDataFactory.create_shop(), item_name='Scissors elsewhere')

        response = self.client.get('/api/v1/expenses/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([e['item_name'] for e in response.data], ['Shop rent', 'Tape measure', 'Scissors'])

        response = self.client.get('/api/v1/expenses/?category=tool')
        self.assertEqual(len(response.data), 2)

        response = self.client.get('/api/v1/expenses/?search=scissors')
        self.assertEqual([e['item_name'] for e in response.data], ['Scissors'])

    def test_update_and_delete(self):
        expense = TestDataFactory.create_expense(self.shop, amount=Decimal('500'))
        response = self.client.patch(f'/api/v1/expenses/{expense.id}/', {'amount': '750'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        expense.refresh_from_db()
        self.assertEqual(expense.amount, Decimal('750.00'))

        response = self.client.delete(f'/api/v1/expenses/{expense.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Expense.objects.filter(pk=expense.id).exists())

    def test_other_shops_expenses_are_invisible(self):
        expense = TestDataFactory.create_expense(TestDataFactory.create_shop())
        response = self.client.get(f'/api/v1/expenses/{expense.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_summary(self):
        TestDataFactory.create_expense(self.shop, category='tool', amount=Decimal('1000'))
        TestDataFactory.create_expense(self.shop, category='rent', amount=Decimal('50000'))
        TestDataFactory.create_expense(self.shop, category='tool', amount=Decimal('2500'),
                                       date=self.today.replace(day=1) - timedelta(days=1))

        response = self.client.get('/api/v1/expenses/summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 53500.0)
        self.assertEqual(response.data['this_month'], 51000.0)
        self.assertEqual(response.data['count'], 3)
        self.assertEqual(response.data['by_category'], [
            {'category': 'rent', 'label': 'Rent', 'total': 50000.0},
            {'category': 'tool', 'label': 'Tool', 'total': 3500.0},
        ])

    def test_summary_respects_filters(self):
        TestDataFactory.create_expense(self.shop, category='tool', amount=Decimal('1000'))
        TestDataFactory.create_expense(self.shop, category='rent', amount=Decimal('50000'))
        response = self.client.get('/api/v1/expenses/summary/?category=tool')
        self.assertEqual(response.data['total'], 1000.0)
        self.assertEqual(len(response.data['by_category']), 1)
