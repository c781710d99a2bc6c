"""
Cache invalidation signals
Automatically invalidate cache when data changes
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .model_cache import invalidate_dashboard_stats, invalidate_customer_list

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()


@contextmanager
def suspend_cache_signals():
    """
    Context manager to temporarily suspend cache invalidation signals.
    Useful for bulk operations (seeding) to prevent excessive cache clearing.
    Remember to manually invalidate cache after the block!
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


# Dashboard cache invalidation
@receiver([post_save, post_delete])
def invalidate_dashboard_cache(sender, instance, **kwargs):
    """Invalidate a user's dashboard stats when their profile, products or orders change"""
    if is_suspended():
        return

    # Order items are always saved together with their order
    if sender.__name__ in ['Product', 'Order']:
        invalidate_dashboard_stats(getattr(instance, 'user_id', None))
    elif sender.__name__ == 'User':
        # The stats carry the business name and type
        invalidate_dashboard_stats(instance.pk)


# Customer list cache invalidation
@receiver([post_save, post_delete])
def invalidate_customer_cache(sender, instance, **kwargs):
    """Invalidate the customer list when customers change"""
    if is_suspended():
        return

    if sender.__name__ == 'Customer':
        invalidate_customer_list()
