"""
Test suite for the catalog module
Tests: Categories, Product CRUD, Search, Price parsing, Ownership
"""
from decimal import Decimal
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from bizpanel.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizpanel.orders.models import OrderItem
from .models import Product
from .utils import DEFAULT_CATEGORIES, DEFAULT_IMAGE, parse_price


class ParsePriceTests(TestCase):
    """Test price parsing"""

    def test_comma_separator(self):
        self.assertEqual(parse_price('12,50'), Decimal('12.50'))

    def test_dot_separator(self):
        self.assertEqual(parse_price(' 7.25 '), Decimal('7.25'))

    def test_numbers(self):
        self.assertEqual(parse_price(3), Decimal('3'))
        self.assertEqual(parse_price(2.5), Decimal('2.5'))

    def test_invalid(self):
        self.assertIsNone(parse_price('abc'))
        self.assertIsNone(parse_price(''))
        self.assertIsNone(parse_price(None))
        self.assertIsNone(parse_price('NaN'))
        self.assertIsNone(parse_price(True))
        self.assertIsNone(parse_price(False))


class CategoryTests(TestCase):
    """Test the category list"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user(business_categories=['Food', 'Pastries'])
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_defaults_plus_business_categories(self):
        response = self.client.get('/api/v1/categories/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, DEFAULT_CATEGORIES + ['Pastries'])


class ProductTests(TestCase):
    """Test product CRUD operations"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_list_products(self):
        """Products are listed oldest first"""
        first = TestDataFactory.create_product(self.user, name='First')
        second = TestDataFactory.create_product(self.user, name='Second')
        response = self.client.get('/api/v1/products/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['id'] for p in response.data], [str(first.id), str(second.id)])

    def test_list_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/products/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_product(self):
        """Creating a product with a comma price and no image"""
        response = self.client.post('/api/v1/products/', {
            'name': 'Chocolate cake',
            'category': 'Food',
            'description': 'Whole cake',
            'price': '12,50',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['price'], '12.50')
        self.assertEqual(response.data['image'], DEFAULT_IMAGE)
        product = Product.objects.get(pk=response.data['id'])
        self.assertEqual(product.user, self.user)

    def test_create_product_requires_name_category_price(self):
        response = self.client.post('/api/v1/products/', {'description': 'No name'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        for field in ('name', 'category', 'price'):
            self.assertIn(field, response.data)

    def test_create_product_invalid_price(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Bad', 'category': 'Food', 'price': 'twelve',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('price', response.data)

    def test_create_product_boolean_price(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Bad', 'category': 'Food', 'price': True,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('price', response.data)

    def test_create_product_negative_price(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Bad', 'category': 'Food', 'price': '-1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_product(self):
        product = TestDataFactory.create_product(self.user, name='Old name')
        response = self.client.patch(f'/api/v1/products/{product.id}/', {
            'name': 'New name',
            'price': '15,00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product.refresh_from_db()
        self.assertEqual(product.name, 'New name')
        self.assertEqual(product.price, Decimal('15.00'))

    def test_clearing_image_falls_back_to_default(self):
        product = TestDataFactory.create_product(self.user, image='https://example.com/a.png')
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'image': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['image'], DEFAULT_IMAGE)

    def test_delete_product_keeps_order_lines(self):
        """Deleting a product leaves the order snapshots untouched"""
        product = TestDataFactory.create_product(self.user, name='Muffin', price='4.00')
        order = TestDataFactory.create_order(self.user, items=[(product, 2)])

        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(pk=product.id).exists())

        item = OrderItem.objects.get(order=order)
        self.assertEqual(item.product_id, product.id)
        self.assertEqual(item.name, 'Muffin')
        order.refresh_from_db()
        self.assertEqual(order.total, Decimal('8.00'))

    def test_other_users_product_is_not_found(self):
        """Products are scoped to their owner"""
        other = TestDataFactory.create_user()
        product = TestDataFactory.create_product(other)
        self.assertEqual(self.client.get(f'/api/v1/products/{product.id}/').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.delete(f'/api/v1/products/{product.id}/').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.get('/api/v1/products/').data, [])


class ProductSearchTests(TestCase):
    """Test product search over name and category"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        TestDataFactory.create_product(self.user, name='Chocolate Cake', category='Food')
        TestDataFactory.create_product(self.user, name='Orange Juice', category='Drinks')
        TestDataFactory.create_product(self.user, name='Consulting hour', category='Services')

    def names(self, query):
        response = self.client.get('/api/v1/products/', {'search': query})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return sorted(p['name'] for p in response.data)

    def test_search_by_name_case_insensitive(self):
        self.assertEqual(self.names('cake'), ['Chocolate Cake'])
        self.assertEqual(self.names('JUICE'), ['Orange Juice'])

    def test_search_by_category(self):
        self.assertEqual(self.names('drink'), ['Orange Juice'])

    def test_search_no_match(self):
        self.assertEqual(self.names('pizza'), [])

    def test_blank_search_returns_all(self):
        self.assertEqual(len(self.names('  ')), 3)

    def test_filter_by_category(self):
        response = self.client.get('/api/v1/products/', {'category': 'services'})
        self.assertEqual([p['name'] for p in response.data], ['Consulting hour'])
