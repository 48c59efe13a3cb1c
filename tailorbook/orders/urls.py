from django.urls import path
from .views import (
    order_list_create, order_detail, order_update_status, order_style_image,
    order_measurements, order_measurement_edit, order_measurement_reset, order_measurement_reset_all,
    order_custom_measurements, order_custom_measurement_detail,
    material_list_create, material_detail,
)

urlpatterns = [
    # Order endpoints
    path('orders/', order_list_create, name='order-list-create'),
    path('orders/<int:pk>/', order_detail, name='order-detail'),
    path('orders/<int:pk>/status/', order_update_status, name='order-update-status'),
    path('orders/<int:pk>/style-image/', order_style_image, name='order-style-image'),

    # Measurement editor endpoints
    path('orders/<int:pk>/measurements/', order_measurements, name='order-measurements'),
    path('orders/<int:pk>/measurements/edit/', order_measurement_edit, name='order-measurement-edit'),
    path('orders/<int:pk>/measurements/reset/', order_measurement_reset, name='order-measurement-reset'),
    path('orders/<int:pk>/measurements/reset-all/', order_measurement_reset_all, name='order-measurement-reset-all'),

    # Custom measurement endpoints
    path('orders/<int:pk>/custom-measurements/', order_custom_measurements, name='order-custom-measurements'),
    path('orders/<int:pk>/custom-measurements/<str:key>/', order_custom_measurement_detail,
         name='order-custom-measurement-detail'),

    # Material endpoints
    path('orders/<int:pk>/materials/', material_list_create, name='material-list-create'),
    path('orders/<int:pk>/materials/<int:material_id>/', material_detail, name='material-detail'),
]
