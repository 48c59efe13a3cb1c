"""
URL configuration for the tailorbook project.

Every app mounts its routes under the versioned API prefix.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "TailorBook Admin Panel"
admin.site.site_title = "TailorBook Admin Portal"
admin.site.index_title = "Welcome to the TailorBook Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('tailorbook.core.urls')),
    path('api/v1/', include('tailorbook.measurements.urls')),
    path('api/v1/', include('tailorbook.shops.urls')),
    path('api/v1/', include('tailorbook.customers.urls')),
    path('api/v1/', include('tailorbook.orders.urls')),
    path('api/v1/', include('tailorbook.expenses.urls')),
    path('api/v1/', include('tailorbook.reports.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
]
