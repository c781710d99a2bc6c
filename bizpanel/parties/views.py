import logging
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from bizpanel.core.model_cache import get_cached_customer_list, cache_customer_list
from .models import Customer
from .serializers import CustomerSerializer

logger = logging.getLogger('bizpanel.parties')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def customer_list(request):
    """List the fixed mock customers"""
    cached_data = get_cached_customer_list()
    if cached_data is not None:
        return Response(cached_data)

    # Lazily create the mock list the first time anyone asks for it
    from bizpanel.core.mock_data import ensure_customers
    ensure_customers()

    serializer = CustomerSerializer(Customer.objects.all(), many=True)
    response_data = list(serializer.data)
    cache_customer_list(response_data)
    return Response(response_data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def customer_detail(request, pk):
    """Retrieve a single customer"""
    customer = get_object_or_404(Customer, pk=pk)
    serializer = CustomerSerializer(customer)
    return Response(serializer.data)
