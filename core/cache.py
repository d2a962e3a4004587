"""
Fail-soft cache helpers.

The cache is an optimisation only: any backend error (Redis down, timeouts,
serialisation problems) is logged and treated as a miss, never raised to the
caller.
"""
import logging
from typing import Any, Optional

from django.core.cache import cache

logger = logging.getLogger(__name__)


def get_cached(key: str) -> Any:
    """Return the cached value, or None on a miss or any cache failure."""
    try:
        return cache.get(key)
    except Exception as e:
        logger.error(f"Cache get error for '{key}': {e}")
        return None


def set_cached(key: str, value: Any, expiry_seconds: Optional[int] = None) -> None:
    """Store `value`; without `expiry_seconds` the entry does not expire."""
    try:
        cache.set(key, value, timeout=expiry_seconds)
    except Exception as e:
        logger.error(f"Cache set error for '{key}': {e}")


def delete_cached(key: str) -> None:
    try:
        cache.delete(key)
    except Exception as e:
        logger.error(f"Cache delete error for '{key}': {e}")
