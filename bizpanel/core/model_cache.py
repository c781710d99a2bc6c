"""
Caching for the per-user dashboard stats and the shared customer list.

Both are read far more often than they change; cache entries are dropped by
the signal receivers in cache_signals.py whenever the underlying rows change.
"""
from django.core.cache import cache
import logging

logger = logging.getLogger(__name__)

# Cache key prefixes
DASHBOARD_STATS_KEY_PREFIX = 'dashboard_stats:'
CUSTOMER_LIST_KEY = 'customer_list:all'

# Cache TTL (Time To Live) in seconds
DASHBOARD_STATS_CACHE_TTL = 300  # 5 minutes
CUSTOMER_LIST_CACHE_TTL = 600  # 10 minutes (the list is fixed)


# ==================== DASHBOARD CACHING ====================

def get_dashboard_stats_cache_key(user_id) -> str:
    """Get cache key for a user's dashboard stats"""
    return f"{DASHBOARD_STATS_KEY_PREFIX}{user_id}"


def get_cached_dashboard_stats(user_id):
    """Get cached dashboard stats for a user"""
    cached_data = cache.get(get_dashboard_stats_cache_key(user_id))
    if cached_data is not None:
        logger.debug(f"Cache hit for dashboard stats: user {user_id}")
    return cached_data


def cache_dashboard_stats(user_id, data, ttl: int = None):
    """Cache dashboard stats for a user"""
    cache.set(get_dashboard_stats_cache_key(user_id), data, ttl or DASHBOARD_STATS_CACHE_TTL)
    logger.debug(f"Cached dashboard stats: user {user_id}")


def invalidate_dashboard_stats(user_id):
    """Drop a user's cached dashboard stats"""
    if user_id is None:
        return
    cache.delete(get_dashboard_stats_cache_key(user_id))
    logger.debug(f"Invalidated dashboard stats: user {user_id}")


# ==================== CUSTOMER CACHING ====================

def get_cached_customer_list():
    """Get the cached serialized customer list"""
    cached_data = cache.get(CUSTOMER_LIST_KEY)
    if cached_data is not None:
        logger.debug("Cache hit for customer list")
    return cached_data


def cache_customer_list(data, ttl: int = None):
    """Cache the serialized customer list"""
    cache.set(CUSTOMER_LIST_KEY, data, ttl or CUSTOMER_LIST_CACHE_TTL)
    logger.debug(f"Cached customer list ({len(data)} customers)")


def invalidate_customer_list():
    """Drop the cached customer list"""
    cache.delete(CUSTOMER_LIST_KEY)
    logger.debug("Invalidated customer list cache")
