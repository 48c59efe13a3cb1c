"""
Dashboard cache invalidation.

A shop's dashboard is cached under ``dashboard_kpis:<shop_id>`` and dropped
whenever a record it aggregates is saved or deleted.
"""
import logging
import threading
from contextlib import contextmanager

from django.core.cache import cache
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

logger = logging.getLogger('tailorbook.cache')

DASHBOARD_CACHE_PREFIX = 'dashboard_kpis'
WATCHED_MODELS = {'shops.Shop', 'customers.Customer', 'orders.Order', 'orders.Material',
                  'expenses.Expense'}

_state = threading.local()


def dashboard_cache_key(shop_id):
    return f"{DASHBOARD_CACHE_PREFIX}:{shop_id}"


@contextmanager
def suspend_cache_signals():
    """
    Skip invalidation for saves made inside the block on this thread.

    Bulk jobs wrap their writes in this and call
    ``invalidate_dashboard_cache`` for each touched shop afterwards.
    """
    previous = is_suspended()
    _state.suspended = True
    try:
        yield
    finally:
        _state.suspended = previous


def is_suspended():
    return getattr(_state, 'suspended', False)


def invalidate_dashboard_cache(shop_id):
    if shop_id is None:
        return
    try:
        cache.delete(dashboard_cache_key(shop_id))
        logger.debug(f"Dashboard cache dropped for shop {shop_id}")
    except Exception as e:
        logger.warning(f"Dashboard cache for shop {shop_id} not dropped: {e}")


def _shop_id_for(instance):
    if instance._meta.label == 'shops.Shop':
        return instance.pk
    shop_id = getattr(instance, 'shop_id', None)
    if shop_id is not None:
        return shop_id
    order_id = getattr(instance, 'order_id', None)
    if order_id is None:
        return None
    from tailorbook.orders.models import Order
    return Order.objects.filter(pk=order_id).values_list('shop_id', flat=True).first()


@receiver([post_save, post_delete])
def invalidate_dashboard_on_change(sender, instance, **kwargs):
    if is_suspended() or sender._meta.label not in WATCHED_MODELS:
        return
    invalidate_dashboard_cache(_shop_id_for(instance))
