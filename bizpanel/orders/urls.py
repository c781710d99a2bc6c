from django.urls import path
from .views import order_list_create, order_detail, order_update_status, order_total_check

urlpatterns = [
    # Order endpoints
    path('orders/', order_list_create, name='order-list-create'),
    path('orders/<uuid:pk>/', order_detail, name='order-detail'),
    path('orders/<uuid:pk>/status/', order_update_status, name='order-update-status'),
    path('orders/<uuid:pk>/total/', order_total_check, name='order-total-check'),
]
