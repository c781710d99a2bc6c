"""
Per-user snapshot of products and orders.

The panel used to keep each user's data in the browser under the keys
``products_<userId>`` and ``orders_<userId>``, every value a JSON array read
and written wholesale. These helpers produce and consume that shape so data
can move between the browser format and the database.
"""
import logging
import uuid
from decimal import Decimal, InvalidOperation
from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from bizpanel.catalog.models import Product
from bizpanel.catalog.utils import DEFAULT_IMAGE
from bizpanel.orders.models import Order, OrderItem
from .cache_signals import suspend_cache_signals
from .model_cache import invalidate_dashboard_stats

logger = logging.getLogger('bizpanel.core')

MAX_PRICE = Decimal('99999999.99')
ORDER_STATUSES = [choice for choice, _ in Order.STATUS_CHOICES]


class SnapshotError(ValueError):
    """Raised when an imported snapshot cannot be loaded"""


def products_key(user_id):
    return f'products_{user_id}'


def orders_key(user_id):
    return f'orders_{user_id}'


def product_to_dict(product):
    return {
        'id': str(product.id),
        'name': product.name,
        'category': product.category,
        'description': product.description,
        'price': float(product.price),
        'image': product.image,
        'createdAt': product.created_at.isoformat(),
        'userId': str(product.user_id),
    }


def order_to_dict(order):
    return {
        'id': str(order.id),
        'customer': {
            'id': str(order.customer_id),
            'name': order.customer_name,
            'email': order.customer_email,
            'phone': order.customer_phone,
        },
        'products': [
            {
                'id': str(item.product_id),
                'name': item.name,
                'price': float(item.price),
                'quantity': item.quantity,
            }
            for item in order.items.all()
        ],
        'status': order.status,
        'total': float(order.total),
        'createdAt': order.created_at.isoformat(),
        'userId': str(order.user_id),
    }


def export_user_data(user):
    """Return ``{products_<id>: [...], orders_<id>: [...]}`` for ``user``"""
    products = Product.objects.filter(user=user).order_by('created_at')
    orders = Order.objects.filter(user=user).prefetch_related('items').order_by('created_at')
    return {
        products_key(user.pk): [product_to_dict(p) for p in products],
        orders_key(user.pk): [order_to_dict(o) for o in orders],
    }


def _uuid(value, field):
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise SnapshotError(f'Invalid {field}: {value!r}')


def _price(value):
    if isinstance(value, bool):
        raise SnapshotError(f'Invalid price: {value!r}')
    try:
        price = Decimal(str(value)).quantize(Decimal('0.01'))
    except (InvalidOperation, TypeError, ValueError):
        raise SnapshotError(f'Invalid price: {value!r}')
    if not Decimal('0.00') <= price <= MAX_PRICE:
        raise SnapshotError(f'Invalid price: {value!r}')
    return price


def _quantity(value):
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise SnapshotError(f'Invalid quantity: {value!r}')
    try:
        quantity = int(value)
    except ValueError:
        raise SnapshotError(f'Invalid quantity: {value!r}')
    if not 1 <= quantity <= OrderItem.MAX_QUANTITY:
        raise SnapshotError(f'Invalid quantity: {value!r}')
    return quantity


def _status(value):
    if value not in ORDER_STATUSES:
        raise SnapshotError(f'Invalid status: {value!r}')
    return value


def _created_at(value):
    parsed = parse_datetime(value) if isinstance(value, str) else None
    if parsed is None:
        return timezone.now()
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def _load_products(user, products_data, fresh_ids):
    """Create the user's products; returns a map of dump id -> stored id"""
    id_map = {}
    for entry in products_data:
        try:
            dump_id = _uuid(entry['id'], 'product id')
            product = Product.objects.create(
                id=uuid.uuid4() if fresh_ids else dump_id,
                user=user,
                name=entry['name'],
                category=entry.get('category') or '',
                description=entry.get('description') or '',
                price=_price(entry.get('price')),
                image=entry.get('image') or DEFAULT_IMAGE,
                created_at=_created_at(entry.get('createdAt')),
            )
        except KeyError as e:
            raise SnapshotError(f'Product is missing {e}')
        except (TypeError, AttributeError):
            raise SnapshotError("Malformed product entry")
        id_map[dump_id] = product.id
    return id_map


def _load_order(user, entry, fresh_ids, product_ids):
    try:
        customer = entry['customer']
        lines = []
        for line in entry.get('products', []):
            dump_id = _uuid(line['id'], 'product id')
            lines.append({
                # Lines of products that are gone keep the id they were sold under
                'product_id': product_ids.get(dump_id, dump_id),
                'name': line['name'],
                'price': _price(line.get('price')),
                'quantity': _quantity(line.get('quantity', 1)),
            })
        order = Order.objects.create(
            id=uuid.uuid4() if fresh_ids else _uuid(entry['id'], 'order id'),
            user=user,
            customer_id=_uuid(customer['id'], 'customer id'),
            customer_name=customer['name'],
            customer_email=customer.get('email') or '',
            customer_phone=customer.get('phone') or '',
            status=_status(entry.get('status', 'new')),
            created_at=_created_at(entry.get('createdAt')),
        )
    except KeyError as e:
        raise SnapshotError(f'Order is missing {e}')
    except (TypeError, AttributeError):
        raise SnapshotError("Malformed order entry")

    OrderItem.objects.bulk_create([
        OrderItem(order=order, position=position, **line)
        for position, line in enumerate(lines)
    ])
    order.total = order.calculate_total()
    if order.total > Order.MAX_TOTAL:
        raise SnapshotError(f'Order total is too large: {entry.get("id")!r}')
    order.save(update_fields=['total', 'updated_at'])
    return order


def import_user_data(user, data, fresh_ids=False):
    """
    Replace ``user``'s products and orders with the arrays in ``data``.

    Only the keys present are replaced. Order totals are recomputed from the
    lines rather than trusted. Importing marks the user as seeded so the mock
    data never lands on top of imported data.

    With ``fresh_ids`` every product and order gets a new id and order lines
    follow their products, so a dump can be copied next to the rows it was
    taken from.
    """
    products_data = data.get(products_key(user.pk))
    orders_data = data.get(orders_key(user.pk))
    result = {'products': 0, 'orders': 0}

    try:
        with transaction.atomic(), suspend_cache_signals():
            now = timezone.now()
            product_ids = {}
            if products_data is not None:
                Product.objects.filter(user=user).delete()
                product_ids = _load_products(user, products_data, fresh_ids)
                result['products'] = len(product_ids)
                user.products_seeded_at = user.products_seeded_at or now

            if orders_data is not None:
                Order.objects.filter(user=user).delete()
                for entry in orders_data:
                    _load_order(user, entry, fresh_ids, product_ids)
                    result['orders'] += 1
                user.orders_seeded_at = user.orders_seeded_at or now

            user.save(update_fields=['products_seeded_at', 'orders_seeded_at', 'updated_at'])
    except IntegrityError as e:
        logger.error(f"IntegrityError importing data for {user.username}: {str(e)}", exc_info=True)
        raise SnapshotError('The dump clashes with existing records; import it with fresh ids.')

    invalidate_dashboard_stats(user.pk)
    logger.info(f"Imported {result['products']} products and {result['orders']} orders for {user.username}")
    return result
