"""
Fixed-window rate limiting keyed by client IP.

Backed by the `limits` library so counters live in memory during
development and in Redis when `RATELIMIT_STORAGE_URI` points at it.
"""
import logging
import math
import time
from dataclasses import dataclass
from functools import wraps
from typing import Optional

from django.conf import settings
from django.http import HttpRequest, HttpResponse
from limits import parse
from limits.storage import storage_from_string
from limits.strategies import FixedWindowRateLimiter

from .http import client_ip, json_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RatePolicy:
    scope: str
    rate: str
    message: str


API_POLICY = RatePolicy(
    scope='api',
    rate='100/15 minutes',
    message='Too many requests from this IP, please try again later.',
)
AUTH_POLICY = RatePolicy(
    scope='auth',
    rate='10/hour',
    message='Too many authentication attempts from this IP, please try again later.',
)
PASSWORD_RESET_POLICY = RatePolicy(
    scope='password-reset',
    rate='3/hour',
    message='Too many password reset attempts from this IP, please try again later.',
)
INVITE_POLICY = RatePolicy(
    scope='invite',
    rate='10/hour',
    message='Too many invitations from this IP, please try again later.',
)


@dataclass
class WindowState:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float

    @property
    def reset_in(self) -> int:
        return max(0, math.ceil(self.reset_at - time.time()))


_limiter: Optional[FixedWindowRateLimiter] = None


def get_limiter() -> FixedWindowRateLimiter:
    global _limiter
    if _limiter is None:
        _limiter = FixedWindowRateLimiter(storage_from_string(settings.RATELIMIT_STORAGE_URI))
    return _limiter


def reset_limiter() -> None:
    """Drop all counters and the cached limiter (tests, settings changes)."""
    global _limiter
    if _limiter is not None:
        _limiter.storage.reset()
    _limiter = None


def hit(policy: RatePolicy, key: str) -> Optional[WindowState]:
    """
    Count one request against `policy` for `key`.

    Returns None when the counter storage is unreachable; requests are then
    let through rather than failed.
    """
    item = parse(policy.rate)
    limiter = get_limiter()
    try:
        allowed = limiter.hit(item, policy.scope, key)
        reset_at, remaining = limiter.get_window_stats(item, policy.scope, key)
    except Exception as e:
        logger.error(f"Rate limit storage error for scope {policy.scope}: {e}")
        return None
    return WindowState(allowed=allowed, limit=item.amount, remaining=remaining, reset_at=reset_at)


def apply_headers(response: HttpResponse, state: WindowState) -> HttpResponse:
    response['RateLimit-Limit'] = str(state.limit)
    response['RateLimit-Remaining'] = str(state.remaining)
    response['RateLimit-Reset'] = str(state.reset_in)
    return response


def too_many_requests(policy: RatePolicy, state: WindowState) -> HttpResponse:
    response = json_error(policy.message, status=429)
    response['Retry-After'] = str(state.reset_in)
    return apply_headers(response, state)


def check_request(request: HttpRequest, policy: RatePolicy) -> Optional[WindowState]:
    if not settings.RATELIMIT_ENABLED:
        return None
    return hit(policy, client_ip(request))


def rate_limit(policy: RatePolicy):
    """View decorator enforcing `policy` before the view runs."""
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped_view(request, *args, **kwargs):
            state = check_request(request, policy)
            if state is not None and not state.allowed:
                logger.warning(f"Rate limit '{policy.scope}' exceeded by {client_ip(request)}")
                return too_many_requests(policy, state)
            response = view_func(request, *args, **kwargs)
            if state is not None:
                apply_headers(response, state)
            return response
        return _wrapped_view
    return decorator
