"""
Test suite for the orders module
Tests: Order creation, Totals, Line snapshots, Editing, Status updates, Filtering, Ownership
"""
from decimal import Decimal
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from bizpanel.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .models import Order, OrderItem


class OrderTests(TestCase):
    """Test order CRUD operations"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer(name='Ana Souza', email='ana@example.com')
        self.cake = TestDataFactory.create_product(self.user, name='Cake', price='12.50')
        self.juice = TestDataFactory.create_product(self.user, name='Juice', price='4.00')

    def create_order(self, items, **extra):
        payload = {'customer': str(self.customer.id), 'items': items}
        payload.update(extra)
        return self.client.post('/api/v1/orders/', payload, format='json')

    def test_create_order(self):
        """The server copies names and prices and computes the total"""
        response = self.create_order([
            {'product_id': str(self.cake.id), 'quantity': 2},
            {'product_id': str(self.juice.id), 'quantity': 3},
        ])
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'new')
        self.assertEqual(response.data['total'], '37.00')
        self.assertEqual(response.data['customer']['name'], 'Ana Souza')
        self.assertEqual(response.data['customer']['email'], 'ana@example.com')
        self.assertEqual([item['name'] for item in response.data['items']], ['Cake', 'Juice'])
        self.assertEqual(response.data['items'][0]['line_total'], '25.00')

    def test_client_total_is_ignored(self):
        response = self.create_order([{'product_id': str(self.cake.id), 'quantity': 1}], total='1.00')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total'], '12.50')

    def test_create_order_with_status(self):
        response = self.create_order([{'product_id': str(self.cake.id), 'quantity': 1}], status='processing')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'processing')

    def test_duplicate_products_are_merged(self):
        response = self.create_order([
            {'product_id': str(self.cake.id), 'quantity': 1},
            {'product_id': str(self.cake.id), 'quantity': 2},
        ])
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(response.data['items'][0]['quantity'], 3)
        self.assertEqual(response.data['total'], '37.50')

    def test_order_requires_items(self):
        response = self.create_order([])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data)

    def test_order_requires_customer(self):
        response = self.client.post('/api/v1/orders/', {
            'items': [{'product_id': str(self.cake.id), 'quantity': 1}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('customer', response.data)

    def test_unknown_customer(self):
        response = self.client.post('/api/v1/orders/', {
            'customer': '00000000-0000-0000-0000-000000000000',
            'items': [{'product_id': str(self.cake.id), 'quantity': 1}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('customer', response.data)

    def test_zero_quantity_rejected(self):
        response = self.create_order([{'product_id': str(self.cake.id), 'quantity': 0}])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_quantity_upper_bound(self):
        response = self.create_order([{'product_id': str(self.cake.id), 'quantity': 10 ** 11}])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data)
        self.assertFalse(Order.objects.filter(user=self.user).exists())

    def test_merged_quantity_upper_bound(self):
        response = self.create_order([
            {'product_id': str(self.cake.id), 'quantity': OrderItem.MAX_QUANTITY},
            {'product_id': str(self.cake.id), 'quantity': 1},
        ])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data)

    def test_total_beyond_column_rejected(self):
        """Orders whose total would not fit the stored column are refused"""
        pricey = TestDataFactory.create_product(self.user, name='Yacht', price='99999999.99')
        response = self.create_order([{'product_id': str(pricey.id), 'quantity': 200}])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data)
        self.assertFalse(Order.objects.filter(user=self.user).exists())

    def test_other_users_product_rejected(self):
        """Orders can only use the user's own products"""
        other = TestDataFactory.create_user()
        foreign = TestDataFactory.create_product(other)
        response = self.create_order([{'product_id': str(foreign.id), 'quantity': 1}])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Order.objects.filter(user=self.user).exists())

    def test_line_snapshot_survives_product_changes(self):
        """Renaming, repricing or deleting a product does not alter existing orders"""
        order_id = self.create_order([{'product_id': str(self.cake.id), 'quantity': 2}]).data['id']
        self.cake.name = 'Big Cake'
        self.cake.price = Decimal('99.00')
        self.cake.save()
        self.juice.delete()

        response = self.client.get(f'/api/v1/orders/{order_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['items'][0]['name'], 'Cake')
        self.assertEqual(response.data['items'][0]['price'], '12.50')
        self.assertEqual(response.data['total'], '25.00')

    def test_edit_keeps_existing_snapshots(self):
        """Editing an order keeps old line prices and copies new lines from the catalog"""
        order_id = self.create_order([{'product_id': str(self.cake.id), 'quantity': 1}]).data['id']
        self.cake.price = Decimal('20.00')
        self.cake.save()

        response = self.client.put(f'/api/v1/orders/{order_id}/', {
            'customer': str(self.customer.id),
            'items': [
                {'product_id': str(self.cake.id), 'quantity': 2},
                {'product_id': str(self.juice.id), 'quantity': 1},
            ],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        prices = {item['name']: item['price'] for item in response.data['items']}
        self.assertEqual(prices, {'Cake': '12.50', 'Juice': '4.00'})
        self.assertEqual(response.data['total'], '29.00')

    def test_edit_keeps_line_of_deleted_product(self):
        order_id = self.create_order([{'product_id': str(self.cake.id), 'quantity': 1}]).data['id']
        cake_id = str(self.cake.id)
        self.cake.delete()

        response = self.client.patch(f'/api/v1/orders/{order_id}/', {
            'items': [{'product_id': cake_id, 'quantity': 4}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], '50.00')

    def test_change_customer(self):
        order = TestDataFactory.create_order(self.user, items=[(self.cake, 1)])
        response = self.client.patch(f'/api/v1/orders/{order.id}/', {'customer': str(self.customer.id)}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['customer']['name'], 'Ana Souza')
        self.assertEqual(response.data['total'], '12.50')

    def test_delete_order(self):
        order = TestDataFactory.create_order(self.user, items=[(self.cake, 1)])
        response = self.client.delete(f'/api/v1/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Order.objects.filter(pk=order.id).exists())
        self.assertFalse(OrderItem.objects.filter(order_id=order.id).exists())

    def test_other_users_order_is_not_found(self):
        other = TestDataFactory.create_user()
        order = TestDataFactory.create_order(other)
        self.assertEqual(self.client.get(f'/api/v1/orders/{order.id}/').status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.patch(f'/api/v1/orders/{order.id}/status/', {'status': 'completed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class OrderStatusTests(TestCase):
    """Test order status updates"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.order = TestDataFactory.create_order(self.user, status='completed')

    def test_any_transition_allowed(self):
        """Completed orders can move back to new"""
        response = self.client.patch(f'/api/v1/orders/{self.order.id}/status/', {'status': 'new'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, 'new')

    def test_invalid_status(self):
        response = self.client.patch(f'/api/v1/orders/{self.order.id}/status/', {'status': 'shipped'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_status_change_keeps_total(self):
        total = self.order.total
        self.client.post(f'/api/v1/orders/{self.order.id}/status/', {'status': 'processing'}, format='json')
        self.order.refresh_from_db()
        self.assertEqual(self.order.total, total)


class OrderFilterTests(TestCase):
    """Test order filtering by status and search"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        bread = TestDataFactory.create_product(self.user, name='Bread')
        coffee = TestDataFactory.create_product(self.user, name='Coffee')
        ana = TestDataFactory.create_customer(name='Ana Souza', email='ana@example.com')
        bruno = TestDataFactory.create_customer(name='Bruno Lima', email='bruno@example.com')
        self.first = TestDataFactory.create_order(self.user, customer=ana, items=[(bread, 1), (coffee, 1)], status='new')
        self.second = TestDataFactory.create_order(self.user, customer=bruno, items=[(coffee, 2)], status='completed')

    def ids(self, **params):
        response = self.client.get('/api/v1/orders/', params)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return [o['id'] for o in response.data]

    def test_list_all(self):
        self.assertEqual(self.ids(), [str(self.first.id), str(self.second.id)])
        self.assertEqual(self.ids(status='all'), [str(self.first.id), str(self.second.id)])

    def test_filter_by_status(self):
        self.assertEqual(self.ids(status='completed'), [str(self.second.id)])
        self.assertEqual(self.ids(status='processing'), [])

    def test_search_customer_name(self):
        self.assertEqual(self.ids(search='bruno'), [str(self.second.id)])

    def test_search_customer_email(self):
        self.assertEqual(self.ids(search='ANA@'), [str(self.first.id)])

    def test_search_product_name_is_distinct(self):
        """An order matching on several lines is listed once"""
        self.assertEqual(self.ids(search='o'), [str(self.first.id), str(self.second.id)])
        self.assertEqual(self.ids(search='bread'), [str(self.first.id)])

    def test_search_and_status_combined(self):
        self.assertEqual(self.ids(search='coffee', status='new'), [str(self.first.id)])

    def test_search_no_match(self):
        self.assertEqual(self.ids(search='pizza'), [])


class OrderTotalCheckTests(TestCase):
    """Test the stored total consistency check"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        product = TestDataFactory.create_product(self.user, price='3.30')
        self.order = TestDataFactory.create_order(self.user, items=[(product, 3)])

    def test_consistent_total(self):
        response = self.client.get(f'/api/v1/orders/{self.order.id}/total/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['consistent'])
        self.assertEqual(response.data['computed_total'], '9.90')

    def test_drift_detected(self):
        Order.objects.filter(pk=self.order.pk).update(total=Decimal('1.00'))
        response = self.client.get(f'/api/v1/orders/{self.order.id}/total/')
        self.assertFalse(response.data['consistent'])
        self.assertEqual(response.data['stored_total'], '1.00')
