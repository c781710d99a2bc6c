"""
Test suite for the reports module
Tests: Dashboard stats, First-visit seeding, Caching
"""
from decimal import Decimal
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from bizpanel.catalog.models import Product
from bizpanel.core.model_cache import get_cached_dashboard_stats
from bizpanel.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizpanel.orders.models import Order


class DashboardTests(TestCase):
    """Test the dashboard endpoint"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user(business_name='Corner Bakery')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_dashboard_stats(self):
        bread = TestDataFactory.create_product(self.user, price='5.00')
        TestDataFactory.create_product(self.user, price='8.00')
        TestDataFactory.create_order(self.user, items=[(bread, 2)], status='new')
        TestDataFactory.create_order(self.user, items=[(bread, 1)], status='completed')

        response = self.client.get('/api/v1/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['business_name'], 'Corner Bakery')
        self.assertEqual(response.data['total_products'], 2)
        self.assertEqual(response.data['total_orders'], 2)
        self.assertEqual(response.data['total_revenue'], '15.00')
        self.assertEqual(response.data['orders_by_status'], {'new': 1, 'processing': 0, 'completed': 1})

    def test_recent_orders_newest_first(self):
        """Only the five most recent orders are shown, newest first"""
        orders = [TestDataFactory.create_order(self.user) for _ in range(7)]
        response = self.client.get('/api/v1/dashboard/')
        recent = [o['id'] for o in response.data['recent_orders']]
        self.assertEqual(recent, [str(o.id) for o in reversed(orders)][:5])

    def test_business_name_fallback(self):
        self.user.business_name = ''
        self.user.save()
        response = self.client.get('/api/v1/dashboard/')
        self.assertEqual(response.data['business_name'], 'Partner')

    def test_empty_dashboard(self):
        response = self.client.get('/api/v1/dashboard/')
        self.assertEqual(response.data['total_orders'], 0)
        self.assertEqual(response.data['total_revenue'], '0.00')
        self.assertEqual(response.data['recent_orders'], [])

    def test_stats_are_other_users_free(self):
        other = TestDataFactory.create_user()
        TestDataFactory.create_order(other)
        response = self.client.get('/api/v1/dashboard/')
        self.assertEqual(response.data['total_orders'], 0)
        self.assertEqual(response.data['total_products'], 0)

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class DashboardSeedingTests(TestCase):
    """Test that the first dashboard visit seeds mock data exactly once"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user(seeded=False)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_first_visit_seeds(self):
        response = self.client.get('/api/v1/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_products'], 5)
        self.assertEqual(response.data['total_orders'], 3)
        self.assertEqual(len(response.data['recent_orders']), 3)

    def test_revenue_matches_seeded_orders(self):
        response = self.client.get('/api/v1/dashboard/')
        expected = sum((o.calculate_total() for o in Order.objects.filter(user=self.user)), Decimal('0.00'))
        self.assertEqual(response.data['total_revenue'], str(expected))

    def test_no_reseed_after_deleting_everything(self):
        self.client.get('/api/v1/dashboard/')
        for product in Product.objects.filter(user=self.user):
            self.client.delete(f'/api/v1/products/{product.id}/')
        for order in Order.objects.filter(user=self.user):
            self.client.delete(f'/api/v1/orders/{order.id}/')

        response = self.client.get('/api/v1/dashboard/')
        self.assertEqual(response.data['total_products'], 0)
        self.assertEqual(response.data['total_orders'], 0)


class DashboardCacheTests(TestCase):
    """Test dashboard caching and invalidation"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_stats_cached(self):
        self.client.get('/api/v1/dashboard/')
        self.assertIsNotNone(get_cached_dashboard_stats(self.user.pk))

    def test_new_product_invalidates(self):
        self.client.get('/api/v1/dashboard/')
        self.client.post('/api/v1/products/', {'name': 'Tea', 'category': 'Drinks', 'price': '3'}, format='json')
        self.assertIsNone(get_cached_dashboard_stats(self.user.pk))
        response = self.client.get('/api/v1/dashboard/')
        self.assertEqual(response.data['total_products'], 1)

    def test_status_change_invalidates(self):
        order = TestDataFactory.create_order(self.user, status='new')
        self.client.get('/api/v1/dashboard/')
        self.client.patch(f'/api/v1/orders/{order.id}/status/', {'status': 'completed'}, format='json')
        response = self.client.get('/api/v1/dashboard/')
        self.assertEqual(response.data['orders_by_status']['completed'], 1)
        self.assertEqual(response.data['orders_by_status']['new'], 0)

    def test_profile_rename_invalidates(self):
        """The dashboard shows the new business name right after a profile change"""
        response = self.client.get('/api/v1/dashboard/')
        self.assertEqual(response.data['business_name'], 'Test Business')

        response = self.client.patch('/api/v1/profile/', {'business_name': 'Renamed Co'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(get_cached_dashboard_stats(self.user.pk))

        response = self.client.get('/api/v1/dashboard/')
        self.assertEqual(response.data['business_name'], 'Renamed Co')
