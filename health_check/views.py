import logging
from datetime import datetime

from django.conf import settings
from django.core.cache import cache
from django.db import connection
from django.http import HttpRequest, JsonResponse

logger = logging.getLogger(__name__)

CACHE_CHECK_KEY = 'health:ping'


def _cache_status() -> str:
    try:
        cache.set(CACHE_CHECK_KEY, 'ok', timeout=10)
        return 'connected' if cache.get(CACHE_CHECK_KEY) == 'ok' else 'unavailable'
    except Exception as e:
        logger.warning(f"Health check cache round trip failed: {e}")
        return 'unavailable'


def health_check(request: HttpRequest) -> JsonResponse:
    """
    Health check endpoint for monitoring and load balancers.

    The database must be reachable for a 200. The cache is reported but
    does not fail the check, since every cached path falls back to the
    database.

    Returns:
        JsonResponse with status 200 if healthy, 500 if unhealthy
    """
    cache_status = _cache_status()
    try:
        connection.ensure_connection()
    except Exception as e:
        logger.error(f"Health check database error: {e}")
        payload = {
            'status': 'unhealthy',
            'database': 'unavailable',
            'cache': cache_status,
            'timestamp': datetime.now().isoformat()
        }
        if settings.EXPOSE_ERROR_DETAILS:
            payload['error'] = str(e)
        return JsonResponse(payload, status=500)

    return JsonResponse({
        'status': 'healthy',
        'database': 'connected',
        'cache': cache_status,
        'timestamp': datetime.now().isoformat()
    })
