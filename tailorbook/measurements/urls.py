from django.urls import path
from . import views

urlpatterns = [
    path('measurements/catalog/', views.catalog, name='measurement-catalog'),
    path('measurements/catalog/<str:gender>/', views.gender_catalog, name='measurement-gender-catalog'),
    path('measurements/catalog/<str:gender>/<str:garment_type>/', views.garment_requirements, name='measurement-garment-requirements'),
    path('measurements/resolve/', views.resolve, name='measurement-resolve'),
]
