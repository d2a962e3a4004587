from django.http import HttpRequest, JsonResponse
from django.middleware.csrf import get_token
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_GET

from .http import json_error


def csrf_failure(request: HttpRequest, reason: str = '') -> JsonResponse:
    """CSRF_FAILURE_VIEW: a fixed body, whatever the reason."""
    return JsonResponse({'error': 'Invalid or missing CSRF token'}, status=403)


@require_GET
@ensure_csrf_cookie
def csrf_token(request: HttpRequest) -> JsonResponse:
    """Hand the SPA a token to send back in the X-CSRFToken header."""
    return JsonResponse({'success': True, 'csrfToken': get_token(request)})


def not_found(request: HttpRequest, exception=None) -> JsonResponse:
    return json_error('Not found', status=404)


def server_error(request: HttpRequest) -> JsonResponse:
    return json_error('Internal server error', status=500)
