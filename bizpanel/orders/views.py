import logging
from decimal import Decimal
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.db import IntegrityError
from .models import Order
from .serializers import OrderSerializer, OrderWriteSerializer, OrderStatusSerializer
from .filters import OrderFilter

logger = logging.getLogger('bizpanel.orders')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_list_create(request):
    """List the user's orders (?status=, ?search=) or create an order"""
    if request.method == 'GET':
        queryset = Order.objects.filter(user=request.user).prefetch_related('items')
        filterset = OrderFilter(request.query_params, queryset=queryset)
        orders = filterset.qs
        serializer = OrderSerializer(orders, many=True)
        return Response(serializer.data)
    else:
        serializer = OrderWriteSerializer(data=request.data, context={'request': request, 'user': request.user})
        if serializer.is_valid():
            try:
                order = serializer.save()
            except IntegrityError as e:
                logger.error(f"IntegrityError creating order: {str(e)}", exc_info=True)
                return Response({'error': 'An error occurred while saving the order'}, status=status.HTTP_400_BAD_REQUEST)
            logger.info(f"Order {order.id} for '{order.customer_name}' created by {request.user.username} (total={order.total})")
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        logger.warning(f"Rejected order from {request.user.username}: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def order_detail(request, pk):
    """Retrieve, update or delete one of the user's orders"""
    order = get_object_or_404(Order, pk=pk, user=request.user)

    if request.method == 'GET':
        serializer = OrderSerializer(order)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        partial = request.method == 'PATCH'
        serializer = OrderWriteSerializer(
            order, data=request.data, partial=partial,
            context={'request': request, 'user': request.user}
        )
        if serializer.is_valid():
            try:
                order = serializer.save()
            except IntegrityError as e:
                logger.error(f"IntegrityError updating order {order.id}: {str(e)}", exc_info=True)
                return Response({'error': 'An error occurred while saving the order'}, status=status.HTTP_400_BAD_REQUEST)
            logger.info(f"Order {order.id} updated by {request.user.username} (total={order.total})")
            return Response(serializer.data)
        logger.warning(f"Rejected update of order {order.id}: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        order_id = order.id
        order.delete()
        logger.info(f"Order {order_id} deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PATCH', 'POST'])
@permission_classes([IsAuthenticated])
def order_update_status(request, pk):
    """Set an order's status; any status can move to any other"""
    order = get_object_or_404(Order, pk=pk, user=request.user)
    serializer = OrderStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_status = order.status
    order.status = serializer.validated_data['status']
    order.save(update_fields=['status', 'updated_at'])
    logger.info(f"Order {order.id} status {old_status} -> {order.status} by {request.user.username}")
    return Response(OrderSerializer(order).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_total_check(request, pk):
    """Compare the stored total with the sum of the order's lines"""
    order = get_object_or_404(Order, pk=pk, user=request.user)
    computed = order.calculate_total()
    consistent = computed == order.total
    if not consistent:
        logger.warning(f"Order {order.id} total drift: stored={order.total} computed={computed}")
    return Response({
        'id': str(order.id),
        'stored_total': str(order.total),
        'computed_total': str(computed.quantize(Decimal('0.01'))),
        'consistent': consistent,
    })
