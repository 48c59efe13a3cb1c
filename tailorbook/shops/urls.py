from django.urls import path
from .views import shop_profile, shop_logo

urlpatterns = [
    path('shop/', shop_profile, name='shop-profile'),
    path('shop/logo/', shop_logo, name='shop-logo'),
]
