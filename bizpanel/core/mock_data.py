"""
Mock data generation for new business accounts.

Every user gets a starter catalog and a few orders the first time they reach
the dashboard (or finish onboarding). Seeding happens once per entity kind: the
``products_seeded_at`` / ``orders_seeded_at`` markers on the user record it, so
a user who deletes everything is not reseeded.
"""
import logging
import random
from datetime import timedelta
from decimal import Decimal
from django.db import transaction
from django.utils import timezone
from bizpanel.catalog.models import Product
from bizpanel.catalog.utils import DEFAULT_CATEGORIES, SAMPLE_IMAGES
from bizpanel.orders.models import Order, OrderItem
from bizpanel.parties.models import Customer
from .cache_signals import suspend_cache_signals
from .model_cache import invalidate_dashboard_stats, invalidate_customer_list
from .models import User

logger = logging.getLogger('bizpanel.core')

MOCK_CUSTOMER_COUNT = 5
SEED_PRODUCT_COUNT = 5
SEED_ORDER_COUNT = 3
ORDER_STATUSES = [choice for choice, _ in Order.STATUS_CHOICES]


def _random_past(rng, max_days=30):
    return timezone.now() - timedelta(days=rng.randint(0, max_days - 1))


def generate_customers(count, rng=None):
    """Build (unsaved) mock customers 'Customer 1'..'Customer <count>'"""
    rng = rng or random
    customers = []
    for i in range(count):
        customers.append(Customer(
            name=f'Customer {i + 1}',
            email=f'customer{i + 1}@example.com',
            phone=f'(11) 9{rng.randint(1000, 9999)}-{rng.randint(1000, 9999)}',
        ))
    return customers


def ensure_customers(count=MOCK_CUSTOMER_COUNT, rng=None):
    """Make sure the fixed mock customer list exists; safe to call repeatedly"""
    created = 0
    for customer in generate_customers(count, rng=rng):
        _, was_created = Customer.objects.get_or_create(
            name=customer.name,
            defaults={'email': customer.email, 'phone': customer.phone},
        )
        if was_created:
            created += 1
    if created:
        logger.info(f"Created {created} mock customers")
        invalidate_customer_list()
    return list(Customer.objects.filter(name__in=[f'Customer {i + 1}' for i in range(count)]))


def generate_products(user, count, rng=None):
    """Create ``count`` random products for ``user``"""
    rng = rng or random
    products = []
    for i in range(count):
        products.append(Product(
            user=user,
            name=f'Product {i + 1}',
            category=rng.choice(DEFAULT_CATEGORIES),
            description=f'Description of product {i + 1}. This is a sample product.',
            price=Decimal(rng.randint(10, 109)).quantize(Decimal('0.01')),
            image=rng.choice(SAMPLE_IMAGES),
            created_at=_random_past(rng),
        ))
    return Product.objects.bulk_create(products)


def generate_orders(user, products, count, rng=None):
    """
    Create ``count`` random orders for ``user``.

    Each order holds 1-3 distinct products from ``products`` with a quantity of
    1-3, a random mock customer and a random status.
    """
    rng = rng or random
    products = list(products)
    customers = ensure_customers(rng=rng)
    orders = []

    for _ in range(count):
        product_count = rng.randint(1, 3)
        picked = rng.sample(products, min(product_count, len(products)))
        customer = rng.choice(customers)

        order = Order.objects.create(
            user=user,
            customer_id=customer.id,
            customer_name=customer.name,
            customer_email=customer.email,
            customer_phone=customer.phone,
            status=rng.choice(ORDER_STATUSES),
            created_at=_random_past(rng),
        )
        OrderItem.objects.bulk_create([
            OrderItem(
                order=order,
                position=position,
                product_id=product.id,
                name=product.name,
                price=product.price,
                quantity=rng.randint(1, 3),
            )
            for position, product in enumerate(picked)
        ])
        order.total = order.calculate_total()
        order.save(update_fields=['total', 'updated_at'])
        orders.append(order)

    return orders


def initialize_user_data(user, rng=None):
    """
    Seed a user's products and orders unless they were seeded before.

    Returns a dict with the number of products and orders created.
    """
    result = {'products_created': 0, 'orders_created': 0}
    if user is None or user.pk is None:
        return result

    with transaction.atomic(), suspend_cache_signals():
        # Row lock so two concurrent first visits cannot both seed
        locked = User.objects.select_for_update().get(pk=user.pk)
        now = timezone.now()

        if locked.products_seeded_at is None:
            if not Product.objects.filter(user=locked).exists():
                result['products_created'] = len(generate_products(locked, SEED_PRODUCT_COUNT, rng=rng))
            locked.products_seeded_at = now

        if locked.orders_seeded_at is None:
            if Order.objects.filter(user=locked).exists():
                locked.orders_seeded_at = now
            else:
                products = list(Product.objects.filter(user=locked))
                if products:
                    result['orders_created'] = len(generate_orders(locked, products, SEED_ORDER_COUNT, rng=rng))
                    locked.orders_seeded_at = now
                else:
                    logger.warning(f"User {locked.username} has no products; order seeding postponed")

        locked.save(update_fields=['products_seeded_at', 'orders_seeded_at', 'updated_at'])

    user.products_seeded_at = locked.products_seeded_at
    user.orders_seeded_at = locked.orders_seeded_at
    invalidate_dashboard_stats(user.pk)

    if result['products_created'] or result['orders_created']:
        logger.info(
            f"Seeded {result['products_created']} products and {result['orders_created']} orders "
            f"for {user.username}"
        )
    return result
