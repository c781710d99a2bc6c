import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.db import IntegrityError
from .models import Product
from .serializers import ProductSerializer
from .filters import ProductFilter
from .utils import DEFAULT_CATEGORIES

logger = logging.getLogger('bizpanel.catalog')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def category_list(request):
    """List the default product categories plus the user's own business categories"""
    categories = list(DEFAULT_CATEGORIES)
    for category in request.user.business_categories or []:
        if category not in categories:
            categories.append(category)
    return Response(categories)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """List the user's products (optionally filtered by ?search=) or create a product"""
    if request.method == 'GET':
        queryset = Product.objects.filter(user=request.user)
        filterset = ProductFilter(request.query_params, queryset=queryset)
        products = filterset.qs
        logger.debug(f"User {request.user.username} listed products (search={request.query_params.get('search', '')!r})")
        serializer = ProductSerializer(products, many=True)
        return Response(serializer.data)
    else:
        serializer = ProductSerializer(data=request.data)
        if serializer.is_valid():
            try:
                product = serializer.save(user=request.user)
            except IntegrityError as e:
                logger.error(f"IntegrityError creating product: {str(e)}", exc_info=True)
                return Response({'error': 'An error occurred while saving the product'}, status=status.HTTP_400_BAD_REQUEST)
            logger.info(f"Product '{product.name}' created by {request.user.username}")
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        logger.warning(f"Rejected product from {request.user.username}: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve, update or delete one of the user's products"""
    product = get_object_or_404(Product, pk=pk, user=request.user)

    if request.method == 'GET':
        serializer = ProductSerializer(product)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        partial = request.method == 'PATCH'
        serializer = ProductSerializer(product, data=request.data, partial=partial)
        if serializer.is_valid():
            serializer.save()
            logger.info(f"Product '{product.name}' ({product.id}) updated by {request.user.username}")
            return Response(serializer.data)
        logger.warning(f"Rejected update of product {product.id}: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        # Orders keep their own snapshot of the product, so nothing else is touched
        product_name = product.name
        product_id = product.id
        product.delete()
        logger.info(f"Product '{product_name}' ({product_id}) deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)
