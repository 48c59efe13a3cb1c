from rest_framework.permissions import BasePermission

from .models import Shop


def get_user_shop(user):
    """The caller's shop, or None when the account has not set one up yet"""
    if not user or not user.is_authenticated:
        return None
    return Shop.objects.filter(owner=user).first()


class HasShop(BasePermission):
    """Business endpoints need a configured shop; the shop is attached to the request."""
    message = 'Set up your shop profile before using this feature.'

    def has_permission(self, request, view):
        shop = get_user_shop(request.user)
        if shop is None:
            return False
        request.shop = shop
        return True
