import logging
from decimal import Decimal
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Sum, Count, DecimalField
from bizpanel.catalog.models import Product
from bizpanel.orders.models import Order
from bizpanel.orders.serializers import OrderSerializer
from bizpanel.core.mock_data import initialize_user_data
from bizpanel.core.model_cache import get_cached_dashboard_stats, cache_dashboard_stats

logger = logging.getLogger('bizpanel.reports')

RECENT_ORDERS_LIMIT = 5


def build_dashboard_stats(user):
    """Aggregate a user's catalog and orders for the dashboard"""
    orders = Order.objects.filter(user=user)

    total_revenue = orders.aggregate(
        total=Sum('total', output_field=DecimalField())
    )['total'] or Decimal('0.00')

    orders_by_status = {choice: 0 for choice, _ in Order.STATUS_CHOICES}
    for row in orders.order_by().values('status').annotate(count=Count('id')):
        orders_by_status[row['status']] = row['count']

    recent_orders = orders.prefetch_related('items').order_by('-created_at')[:RECENT_ORDERS_LIMIT]

    return {
        'business_name': user.business_name or 'Partner',
        'business_type': user.business_type,
        'total_products': Product.objects.filter(user=user).count(),
        'total_orders': sum(orders_by_status.values()),
        'total_revenue': str(Decimal(total_revenue).quantize(Decimal('0.01'))),
        'orders_by_status': orders_by_status,
        'recent_orders': list(OrderSerializer(recent_orders, many=True).data),
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """Dashboard stats; the first visit seeds the user's mock data"""
    user = request.user

    if user.products_seeded_at is None or user.orders_seeded_at is None:
        initialize_user_data(user)

    cached_data = get_cached_dashboard_stats(user.pk)
    if cached_data is not None:
        return Response(cached_data)

    data = build_dashboard_stats(user)
    cache_dashboard_stats(user.pk, data)
    logger.debug(f"Built dashboard stats for {user.username}: {data['total_orders']} orders, revenue {data['total_revenue']}")
    return Response(data)
