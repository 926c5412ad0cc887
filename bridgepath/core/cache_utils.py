"""
Caching utilities for expensive lookups
Uses Redis (django-redis) when configured, local memory otherwise
"""
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
MCP_TOOLS_CACHE_TTL = 300  # 5 minutes
PIPEDREAM_TOKEN_CACHE_TTL = 3300  # just under the 1 hour token lifetime
MATERIAL_PRICES_CACHE_TTL = 600  # 10 minutes

MATERIAL_PRICES_CACHE_KEY = 'material_prices:active'


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive lookups

    Usage:
        @cached_query(cache_ttl=300, key_prefix="mcp_tools")
        def list_tools(external_user_id, app_slug):
            return tools
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)

            cache.set(cache_key, result, cache_ttl)

            return result
        wrapper.cache_key = lambda *args, **kwargs: make_cache_key(key_prefix, *args, **kwargs)
        return wrapper
    return decorator


def invalidate_material_prices():
    cache.delete(MATERIAL_PRICES_CACHE_KEY)
