import logging

import sentry_sdk
from django.conf import settings
from django.core.exceptions import BadRequest, ObjectDoesNotExist, PermissionDenied, ValidationError
from django.db import IntegrityError
from django.http import Http404, HttpRequest, HttpResponse

from .http import client_ip, json_error
from .ratelimit import API_POLICY, apply_headers, check_request, too_many_requests

logger = logging.getLogger(__name__)

API_PREFIX = '/api/'


def _is_api_request(request: HttpRequest) -> bool:
    return request.path.startswith(API_PREFIX)


class ApiRateLimitMiddleware:
    """General rate limit (100 requests / 15 minutes per IP) for every API path."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        if not _is_api_request(request):
            return self.get_response(request)

        state = check_request(request, API_POLICY)
        if state is not None and not state.allowed:
            logger.warning(f"API rate limit exceeded by {client_ip(request)}")
            return too_many_requests(API_POLICY, state)

        response = self.get_response(request)
        if state is not None and 'RateLimit-Limit' not in response:
            apply_headers(response, state)
        return response


class SecurityHeadersMiddleware:
    """
    Headers Django's SecurityMiddleware does not emit.

    The CSP differs between development and production; both policies live
    in settings.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        response = self.get_response(request)
        response.setdefault('Content-Security-Policy', settings.CONTENT_SECURITY_POLICY)
        response.setdefault('X-XSS-Protection', '1; mode=block')
        response.setdefault('Permissions-Policy', settings.PERMISSIONS_POLICY)
        return response


class ApiErrorMiddleware:
    """
    Translate exceptions escaping API views into the JSON error envelope.

    Validation and lookup failures map to 4xx; anything unexpected becomes a
    500 and is reported to Sentry. The underlying message is only included
    when EXPOSE_ERROR_DETAILS is set (never in production).
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        return self.get_response(request)

    def process_exception(self, request: HttpRequest, exception: Exception):
        if not _is_api_request(request):
            return None

        details = str(exception)
        if isinstance(exception, BadRequest):
            return json_error(str(exception) or 'Bad request', status=400)
        elif isinstance(exception, ValidationError):
            status, message = 400, 'Validation error'
            details = exception.message_dict if hasattr(exception, 'error_dict') else exception.messages
        elif isinstance(exception, IntegrityError):
            status, message = 409, 'Duplicate value error'
        elif isinstance(exception, (Http404, ObjectDoesNotExist)):
            status, message = 404, 'Not found'
        elif isinstance(exception, PermissionDenied):
            status, message = 403, 'Forbidden'
        else:
            logger.error(
                f"Unhandled error on {request.method} {request.path}: {exception}",
                exc_info=exception,
            )
            sentry_sdk.capture_exception(exception)
            status, message = 500, 'Internal server error'

        if status < 500:
            logger.info(f"{request.method} {request.path} -> {status}: {exception}")

        if settings.EXPOSE_ERROR_DETAILS:
            return json_error(message, status=status, error=details)
        return json_error(message, status=status)
