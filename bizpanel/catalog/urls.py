from django.urls import path
from .views import category_list, product_list_create, product_detail

urlpatterns = [
    # Category endpoints
    path('categories/', category_list, name='category-list'),

    # Product endpoints
    path('products/', product_list_create, name='product-list-create'),
    path('products/<uuid:pk>/', product_detail, name='product-detail'),
]
