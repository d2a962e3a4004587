import json
from functools import wraps

from django.conf import settings
from django.core.exceptions import BadRequest
from django.http import HttpRequest, JsonResponse


def json_error(message: str, status: int = 400, **extra) -> JsonResponse:
    """Build the `{success: false, message}` error envelope used by every API view."""
    return JsonResponse({'success': False, 'message': message, **extra}, status=status)


def parse_json_body(request: HttpRequest):
    """
    Return the request body as a mapping.

    JSON bodies are decoded; anything else falls back to form data so the
    endpoints also accept plain form posts.

    Raises:
        BadRequest: If the body claims to be JSON but does not decode to an object.
    """
    if request.content_type == 'application/json':
        if not request.body:
            return {}
        try:
            data = json.loads(request.body)
        except json.JSONDecodeError:
            raise BadRequest('Invalid JSON')
        if not isinstance(data, dict):
            raise BadRequest('Invalid JSON')
        return data
    return request.POST


def client_ip(request: HttpRequest) -> str:
    """Client address used as the rate limit key."""
    if settings.RATELIMIT_TRUST_X_FORWARDED_FOR:
        forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
        if forwarded:
            return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', '')


def api_login_required(view_func):
    """Like `login_required`, but answers 401 JSON instead of redirecting."""
    @wraps(view_func)
    def _wrapped_view(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return json_error('Authentication required', status=401)
        return view_func(request, *args, **kwargs)
    return _wrapped_view


def form_errors(form) -> dict:
    """Field name -> list of messages, JSON-safe."""
    return {
        field: [error['message'] for error in errors]
        for field, errors in form.errors.get_json_data().items()
    }


def invalid_form(form) -> JsonResponse:
    """400 envelope for a form that failed validation; the message names the first problem."""
    errors = form_errors(form)
    field, messages = next(iter(errors.items()))
    message = messages[0] if field == '__all__' else f"{field}: {messages[0]}"
    return json_error(message, status=400, errors=errors)


def get_bool(data, key: str):
    """Read an optional boolean from JSON or form data; None when absent."""
    val = data.get(key)
    if val is None:
        return None
    if isinstance(val, bool):
        return val
    return str(val).lower() == 'true'
