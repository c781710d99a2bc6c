"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from bizpanel.catalog.models import Product
from bizpanel.catalog.utils import DEFAULT_IMAGE
from bizpanel.parties.models import Customer
from bizpanel.orders.models import Order, OrderItem
from decimal import Decimal
from django.utils import timezone
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_lowercase + string.digits, k=length))

    @staticmethod
    def create_user(email=None, password='testpass123', onboarded=True, seeded=True, **extra):
        """
        Create a test user; the email doubles as the username.

        ``seeded`` marks the user as already seeded so the dashboard does not
        create mock data behind the test's back.
        """
        if not email:
            email = f'user_{TestDataFactory.random_string(6)}@test.com'
        now = timezone.now() if seeded else None
        defaults = {
            'business_name': 'Test Business' if onboarded else '',
            'business_type': 'restaurant' if onboarded else None,
            'business_categories': ['Food'] if onboarded else [],
            'onboarding_completed': onboarded,
            'products_seeded_at': now,
            'orders_seeded_at': now,
        }
        defaults.update(extra)
        return User.objects.create_user(username=email, email=email, password=password, **defaults)

    @staticmethod
    def create_product(user, name=None, category='Food', price=None, description='', image=DEFAULT_IMAGE):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        if price is None:
            price = Decimal('10.00')
        return Product.objects.create(
            user=user,
            name=name,
            category=category,
            description=description,
            price=Decimal(price),
            image=image,
        )

    @staticmethod
    def create_customer(name=None, phone=None, email=None):
        """Create a test customer"""
        if not name:
            name = f'Customer_{TestDataFactory.random_string(6)}'
        if not phone:
            phone = f'(11) 9{random.randint(1000, 9999)}-{random.randint(1000, 9999)}'
        if not email:
            email = f'{name.lower()}@test.com'
        return Customer.objects.create(name=name, phone=phone, email=email)

    @staticmethod
    def create_order(user, customer=None, items=None, status='new'):
        """
        Create a test order.

        ``items`` is a list of ``(product, quantity)`` pairs; the total is
        computed from them.
        """
        if not customer:
            customer = TestDataFactory.create_customer()
        if items is None:
            items = [(TestDataFactory.create_product(user), 1)]
        order = Order.objects.create(
            user=user,
            customer_id=customer.id,
            customer_name=customer.name,
            customer_email=customer.email,
            customer_phone=customer.phone,
            status=status,
        )
        for position, (product, quantity) in enumerate(items):
            OrderItem.objects.create(
                order=order,
                position=position,
                product_id=product.id,
                name=product.name,
                price=product.price,
                quantity=quantity,
            )
        order.total = order.calculate_total()
        order.save(update_fields=['total', 'updated_at'])
        return order


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
