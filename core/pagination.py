"""
Offset pagination for list endpoints.

`paginate()` wraps a view: it reads `page`/`limit` from the query string,
attaches a `Pagination` to the request for the view's query, and rewrites a
`{'data': [...], 'total': n}` payload into the pagination envelope::

    {
        "data": [...],
        "pagination": {"total": 25, "page": 1, "limit": 10, "pages": 3,
                       "hasNext": true, "hasPrev": false}
    }

Inputs are clamped, never rejected.
"""
import math
import re
from dataclasses import dataclass
from functools import wraps
from numbers import Number
from typing import Any, Mapping, Optional

from django.http import HttpResponse, JsonResponse

DEFAULT_LIMIT = 10
MAX_LIMIT = 100

_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')


def _parse_int(value: Any) -> Optional[int]:
    """Lenient integer parsing: '3', ' 3', '3abc' give 3; 'abc' and None give None."""
    if value is None:
        return None
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    skip: int

    def slice(self, queryset):
        return queryset[self.skip:self.skip + self.limit]


def get_pagination(
    params: Mapping[str, Any],
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> Pagination:
    # Zero counts as "not given", matching the `|| default` fallback of the web client.
    page = max(1, _parse_int(params.get('page')) or 1)
    limit = min(max_limit, max(1, _parse_int(params.get('limit')) or default_limit))
    return Pagination(page=page, limit=limit, skip=(page - 1) * limit)


def _is_paginated_payload(payload: Any) -> bool:
    if not isinstance(payload, dict):
        return False
    total = payload.get('total')
    return (
        isinstance(payload.get('data'), list)
        and isinstance(total, Number)
        and not isinstance(total, bool)
    )


def build_envelope(payload: Any, pagination: Pagination) -> Any:
    """Rewrite `{data, total}` into `{data, pagination}`; anything else is returned as is."""
    if not _is_paginated_payload(payload):
        return payload

    total = payload['total']
    pages = math.ceil(total / pagination.limit)
    return {
        'data': payload['data'],
        'pagination': {
            'total': total,
            'page': pagination.page,
            'limit': pagination.limit,
            'pages': pages,
            'hasNext': pagination.page < pages,
            'hasPrev': pagination.page > 1,
        },
    }


def paginate(default_limit: int = DEFAULT_LIMIT, max_limit: int = MAX_LIMIT):
    """
    View decorator applying pagination.

    The wrapped view may return an `HttpResponse`, which is passed through
    untouched, or a JSON-serialisable payload, which is enveloped when it has
    the `{data, total}` shape and rendered as JSON.
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped_view(request, *args, **kwargs):
            request.pagination = get_pagination(request.GET, default_limit, max_limit)
            result = view_func(request, *args, **kwargs)
            if isinstance(result, HttpResponse):
                return result
            return JsonResponse(build_envelope(result, request.pagination), safe=False)
        return _wrapped_view
    return decorator
