from django.urls import path
from .views import customer_list, customer_detail

urlpatterns = [
    # Customer endpoints (read-only)
    path('customers/', customer_list, name='customer-list'),
    path('customers/<uuid:pk>/', customer_detail, name='customer-detail'),
]
