from django.urls import path
from .views import customer_list_create, customer_detail, customer_measurements, customer_orders

urlpatterns = [
    path('customers/', customer_list_create, name='customer-list-create'),
    path('customers/<int:pk>/', customer_detail, name='customer-detail'),
    path('customers/<int:pk>/measurements/', customer_measurements, name='customer-measurements'),
    path('customers/<int:pk>/orders/', customer_orders, name='customer-orders'),
]
