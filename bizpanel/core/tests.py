"""
Test suite for the core module
Tests: Registration, Login, Onboarding, Business profile, Mock data seeding, Data export/import
"""
import json
import os
import tempfile
from io import StringIO
from django.core.cache import cache
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient
from bizpanel.catalog.models import Product
from bizpanel.orders.models import Order
from bizpanel.parties.models import Customer
from .mock_data import initialize_user_data, ensure_customers
from .models import User
from .storage import SnapshotError, export_user_data, import_user_data, products_key, orders_key
from .test_utils import TestDataFactory, AuthenticatedAPIClient


class AuthTests(TestCase):
    """Test registration, login and token refresh"""

    def setUp(self):
        cache.clear()
        self.client = APIClient()

    def register(self, email='owner@shop.com', password='secret123', confirm=None):
        return self.client.post('/api/v1/auth/register/', {
            'email': email,
            'password': password,
            'password_confirm': confirm if confirm is not None else password,
        }, format='json')

    def test_register(self):
        """Registration creates the user and returns tokens"""
        response = self.register()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['username'], 'owner@shop.com')
        self.assertFalse(response.data['user']['onboarding_completed'])

    def test_register_lowercases_email(self):
        response = self.register(email='Owner@Shop.com')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(User.objects.filter(username='owner@shop.com').exists())

    def test_register_duplicate_email(self):
        """A second account with the same email is rejected"""
        self.register()
        response = self.register(email='OWNER@shop.com')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)

    def test_register_password_mismatch(self):
        response = self.register(confirm='different1')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_register_short_password(self):
        """Passwords need at least 6 characters"""
        response = self.register(password='abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login(self):
        """Login with the email returns tokens and the user"""
        self.register()
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'Owner@Shop.com',
            'password': 'secret123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertEqual(response.data['user']['email'], 'owner@shop.com')

    def test_login_wrong_password(self):
        self.register()
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'owner@shop.com',
            'password': 'wrong-pass',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh(self):
        """A refresh token yields a new access token"""
        refresh = self.register().data['refresh']
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': refresh}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_refresh_invalid_token(self):
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': 'not-a-token'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_health(self):
        response = self.client.get('/api/v1/health/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'ok')


class OnboardingTests(TestCase):
    """Test the onboarding flow"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user(onboarded=False, seeded=False)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_onboarding_completes_profile_and_seeds(self):
        """Onboarding stores the business profile and seeds products and orders"""
        response = self.client.post('/api/v1/auth/onboarding/', {
            'business_type': 'franchise',
            'business_name': '  Corner Shop  ',
            'business_categories': ['Food', 'Drinks', 'Food', ' '],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['user']['onboarding_completed'])
        self.assertEqual(response.data['user']['business_name'], 'Corner Shop')
        self.assertEqual(response.data['user']['business_categories'], ['Food', 'Drinks'])
        self.assertEqual(response.data['seeded'], {'products_created': 5, 'orders_created': 3})
        self.assertEqual(Product.objects.filter(user=self.user).count(), 5)
        self.assertEqual(Order.objects.filter(user=self.user).count(), 3)

    def test_onboarding_requires_category(self):
        response = self.client.post('/api/v1/auth/onboarding/', {
            'business_type': 'restaurant',
            'business_name': 'Diner',
            'business_categories': [],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('business_categories', response.data)

    def test_onboarding_requires_name(self):
        response = self.client.post('/api/v1/auth/onboarding/', {
            'business_type': 'restaurant',
            'business_name': '   ',
            'business_categories': ['Food'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('business_name', response.data)

    def test_onboarding_invalid_business_type(self):
        response = self.client.post('/api/v1/auth/onboarding/', {
            'business_type': 'multinational',
            'business_name': 'Diner',
            'business_categories': ['Food'],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('business_type', response.data)


class ProfileTests(TestCase):
    """Test the business profile settings"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_get_profile(self):
        response = self.client.get('/api/v1/profile/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['business_name'], 'Test Business')

    def test_patch_profile(self):
        """Partial update of the optional fields"""
        response = self.client.patch('/api/v1/profile/', {
            'business_description': 'Fresh bread daily',
            'phone': '(11) 91234-5678',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.business_description, 'Fresh bread daily')
        self.assertEqual(self.user.phone, '(11) 91234-5678')

    def test_put_requires_name_and_type(self):
        response = self.client.put('/api/v1/profile/', {'business_description': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('business_name', response.data)
        self.assertIn('business_type', response.data)

    def test_blank_name_rejected(self):
        response = self.client.patch('/api/v1/profile/', {'business_name': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class MockDataTests(TestCase):
    """Test mock data generation and the seed-once rule"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user(seeded=False)

    def test_seeds_five_products_and_three_orders(self):
        result = initialize_user_data(self.user)
        self.assertEqual(result, {'products_created': 5, 'orders_created': 3})
        self.assertIsNotNone(self.user.products_seeded_at)
        self.assertIsNotNone(self.user.orders_seeded_at)

    def test_seeded_orders_are_consistent(self):
        """Seeded orders reference seeded products and carry correct totals"""
        initialize_user_data(self.user)
        product_ids = set(Product.objects.filter(user=self.user).values_list('id', flat=True))
        for order in Order.objects.filter(user=self.user):
            items = list(order.items.all())
            self.assertTrue(1 <= len(items) <= 3)
            self.assertEqual(len({item.product_id for item in items}), len(items))
            for item in items:
                self.assertIn(item.product_id, product_ids)
                self.assertTrue(1 <= item.quantity <= 3)
            self.assertEqual(order.total, order.calculate_total())
            self.assertIn(order.status, ['new', 'processing', 'completed'])

    def test_seeded_product_prices(self):
        initialize_user_data(self.user)
        for product in Product.objects.filter(user=self.user):
            self.assertTrue(10 <= product.price < 110)
            self.assertTrue(product.image)

    def test_seeding_runs_once(self):
        """Deleting everything does not trigger a reseed"""
        initialize_user_data(self.user)
        Product.objects.filter(user=self.user).delete()
        Order.objects.filter(user=self.user).delete()
        result = initialize_user_data(User.objects.get(pk=self.user.pk))
        self.assertEqual(result, {'products_created': 0, 'orders_created': 0})
        self.assertFalse(Product.objects.filter(user=self.user).exists())

    def test_existing_products_are_not_topped_up(self):
        TestDataFactory.create_product(self.user, name='Own product')
        result = initialize_user_data(self.user)
        self.assertEqual(result['products_created'], 0)
        self.assertEqual(result['orders_created'], 3)
        self.assertEqual(Product.objects.filter(user=self.user).count(), 1)

    def test_ensure_customers_is_idempotent(self):
        ensure_customers()
        ensure_customers()
        self.assertEqual(Customer.objects.filter(name__startswith='Customer ').count(), 5)
        self.assertTrue(Customer.objects.filter(name='Customer 1', email='customer1@example.com').exists())


class SeedCommandTests(TestCase):
    """Test the seed_demo_data management command"""

    def setUp(self):
        cache.clear()

    def test_seed_single_user(self):
        user = TestDataFactory.create_user(seeded=False)
        out = StringIO()
        call_command('seed_demo_data', user=user.username, stdout=out)
        self.assertEqual(Product.objects.filter(user=user).count(), 5)
        self.assertIn('Products Created: 5', out.getvalue())

    def test_seed_skips_seeded_users(self):
        user = TestDataFactory.create_user()
        out = StringIO()
        call_command('seed_demo_data', stdout=out)
        self.assertFalse(Product.objects.filter(user=user).exists())
        self.assertIn('already seeded', out.getvalue())

    def test_seed_unknown_user(self):
        with self.assertRaises(CommandError):
            call_command('seed_demo_data', user='nobody@test.com', stdout=StringIO())


class StorageTests(TestCase):
    """Test the products_<userId> / orders_<userId> export and import"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.customer = TestDataFactory.create_customer(name='Customer 2', email='customer2@example.com')

    def browser_dump(self, status='processing', quantity=3):
        """A dump in the shape the browser app keeps in local storage"""
        return {
            products_key(self.user.pk): [{
                'id': 'c4a1b3f2-3a54-4f1e-9a55-2f4f3c2a1b10',
                'name': 'Product 1',
                'category': 'Drinks',
                'description': 'Description of product 1. This is a sample product.',
                'price': 4.5,
                'image': '',
                'createdAt': '2024-01-10T12:00:00.000Z',
                'userId': str(self.user.pk),
            }],
            orders_key(self.user.pk): [{
                'id': 'd9b2a2d1-8f3e-4c5a-b6a7-1e2f3a4b5c6d',
                'customer': {
                    'id': str(self.customer.id),
                    'name': self.customer.name,
                    'email': self.customer.email,
                    'phone': self.customer.phone,
                },
                'products': [{
                    'id': 'c4a1b3f2-3a54-4f1e-9a55-2f4f3c2a1b10',
                    'name': 'Product 1',
                    'price': 4.5,
                    'quantity': quantity,
                }],
                'status': status,
                'total': 999,
                'createdAt': '2024-01-11T09:30:00.000Z',
                'userId': str(self.user.pk),
            }],
        }

    def write_dump(self, tmp, dump):
        path = os.path.join(tmp, 'dump.json')
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(dump, f)
        return path

    def test_export_shape(self):
        """Orders nest the customer and list their lines under products"""
        product = TestDataFactory.create_product(self.user, name='Cake', price='12.50')
        order = TestDataFactory.create_order(self.user, customer=self.customer, items=[(product, 2)])
        data = export_user_data(self.user)

        self.assertEqual(set(data), {products_key(self.user.pk), orders_key(self.user.pk)})
        exported_product = data[products_key(self.user.pk)][0]
        self.assertEqual(exported_product['name'], 'Cake')
        self.assertEqual(exported_product['price'], 12.5)
        self.assertEqual(exported_product['userId'], str(self.user.pk))
        self.assertIn('createdAt', exported_product)

        exported_order = data[orders_key(self.user.pk)][0]
        self.assertEqual(exported_order['id'], str(order.id))
        self.assertEqual(exported_order['userId'], str(self.user.pk))
        self.assertEqual(exported_order['customer'], {
            'id': str(self.customer.id),
            'name': 'Customer 2',
            'email': 'customer2@example.com',
            'phone': self.customer.phone,
        })
        self.assertEqual(exported_order['products'], [
            {'id': str(product.id), 'name': 'Cake', 'price': 12.5, 'quantity': 2},
        ])
        self.assertEqual(exported_order['total'], 25.0)

    def test_import_browser_dump(self):
        """A browser dump replaces existing data and totals are recomputed"""
        TestDataFactory.create_product(self.user, name='Old')
        result = import_user_data(self.user, self.browser_dump())

        self.assertEqual(result, {'products': 1, 'orders': 1})
        product = Product.objects.get(user=self.user)
        self.assertEqual(str(product.id), 'c4a1b3f2-3a54-4f1e-9a55-2f4f3c2a1b10')
        self.assertEqual(product.name, 'Product 1')

        order = Order.objects.get(user=self.user)
        self.assertEqual(str(order.total), '13.50')
        self.assertEqual(order.status, 'processing')
        self.assertEqual(order.customer_id, self.customer.id)
        self.assertEqual(order.customer_name, 'Customer 2')
        self.assertEqual(order.items.get().product_id, product.id)

    def test_export_then_import_keeps_data(self):
        product = TestDataFactory.create_product(self.user, name='Tea', price='3.20')
        TestDataFactory.create_order(self.user, customer=self.customer, items=[(product, 5)])
        dump = export_user_data(self.user)

        import_user_data(self.user, dump)
        order = Order.objects.get(user=self.user)
        self.assertEqual(str(order.total), '16.00')
        self.assertEqual(order.items.get().product_id, product.id)

    def test_import_rejects_unknown_status(self):
        with self.assertRaises(SnapshotError):
            import_user_data(self.user, self.browser_dump(status='shipped'))
        self.assertFalse(Order.objects.filter(user=self.user).exists())

    def test_import_rejects_bad_quantities(self):
        for quantity in (0, -2, 'many', None, True, 10 ** 9):
            with self.assertRaises(SnapshotError):
                import_user_data(self.user, self.browser_dump(quantity=quantity))
        self.assertFalse(Order.objects.filter(user=self.user).exists())

    def test_import_rejects_bad_ids(self):
        dump = self.browser_dump()
        dump[products_key(self.user.pk)][0]['id'] = 'not-a-uuid'
        with self.assertRaises(SnapshotError):
            import_user_data(self.user, dump)

    def test_export_command_to_file(self):
        TestDataFactory.create_product(self.user)
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'export.json')
            call_command('export_user_data', user=self.user.username, output=path, stdout=StringIO())
            with open(path, encoding='utf-8') as f:
                data = json.load(f)
        self.assertEqual(len(data[products_key(self.user.pk)]), 1)
        self.assertEqual(data[orders_key(self.user.pk)], [])

    def test_import_command_with_source_id(self):
        """A dump taken for another user id can be loaded onto this user"""
        dump = {products_key('browser-user-1'): [{
            'id': 'a0a0a0a0-1111-2222-3333-444455556666',
            'name': 'From browser',
            'price': '7.00',
        }]}
        with tempfile.TemporaryDirectory() as tmp:
            call_command('import_user_data', self.write_dump(tmp, dump), user=self.user.username,
                         source_id='browser-user-1', stdout=StringIO())
        product = Product.objects.get(user=self.user)
        self.assertEqual(product.name, 'From browser')
        self.assertEqual(str(product.price), '7.00')
        self.assertFalse(Order.objects.filter(user=self.user).exists())

    def test_copy_data_between_existing_users(self):
        """Copying a user's export onto another user gives the copies new ids"""
        source = TestDataFactory.create_user()
        product = TestDataFactory.create_product(source, name='Bread', price='2.50')
        order = TestDataFactory.create_order(source, customer=self.customer, items=[(product, 4)])

        with tempfile.TemporaryDirectory() as tmp:
            path = self.write_dump(tmp, export_user_data(source))
            call_command('import_user_data', path, user=self.user.username,
                         source_id=str(source.pk), stdout=StringIO())

        copied_product = Product.objects.get(user=self.user)
        copied_order = Order.objects.get(user=self.user)
        self.assertNotEqual(copied_product.id, product.id)
        self.assertNotEqual(copied_order.id, order.id)
        self.assertEqual(copied_order.items.get().product_id, copied_product.id)
        self.assertEqual(str(copied_order.total), '10.00')
        # The source user's rows are untouched
        self.assertTrue(Product.objects.filter(pk=product.id, user=source).exists())
        self.assertTrue(Order.objects.filter(pk=order.id, user=source).exists())

    def test_clashing_ids_raise_snapshot_error(self):
        """Importing another user's ids without fresh ids fails cleanly"""
        source = TestDataFactory.create_user()
        TestDataFactory.create_product(source)
        dump = export_user_data(source)
        dump = {products_key(self.user.pk): dump[products_key(source.pk)]}

        with self.assertRaises(SnapshotError):
            import_user_data(self.user, dump)
        self.assertEqual(Product.objects.filter(user=source).count(), 1)

    def test_import_command_rejects_bad_price(self):
        dump = {products_key(self.user.pk): [{'id': 'a0a0a0a0-1111-2222-3333-444455556666', 'name': 'X', 'price': 'abc'}]}
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(CommandError):
                call_command('import_user_data', self.write_dump(tmp, dump), user=self.user.username, stdout=StringIO())
