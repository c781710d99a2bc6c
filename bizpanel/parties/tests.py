"""
Test suite for the parties module
Tests: Mock customer list, Customer detail, Caching
"""
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from bizpanel.core.model_cache import get_cached_customer_list
from bizpanel.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .models import Customer


class CustomerTests(TestCase):
    """Test the read-only customer endpoints"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_list_creates_mock_customers(self):
        """The first listing creates the five mock customers"""
        response = self.client.get('/api/v1/customers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['name'] for c in response.data], [f'Customer {i}' for i in range(1, 6)])
        self.assertEqual(response.data[0]['email'], 'customer1@example.com')
        self.assertEqual(Customer.objects.count(), 5)

    def test_list_is_cached(self):
        self.client.get('/api/v1/customers/')
        self.assertIsNotNone(get_cached_customer_list())

    def test_cache_dropped_when_customer_changes(self):
        self.client.get('/api/v1/customers/')
        TestDataFactory.create_customer(name='Walk-in')
        self.assertIsNone(get_cached_customer_list())
        response = self.client.get('/api/v1/customers/')
        self.assertIn('Walk-in', [c['name'] for c in response.data])

    def test_customer_detail(self):
        customer = TestDataFactory.create_customer(name='Ana')
        response = self.client.get(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Ana')

    def test_customers_are_read_only(self):
        response = self.client.post('/api/v1/customers/', {'name': 'New'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/customers/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
