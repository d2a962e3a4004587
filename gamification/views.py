from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET

from accounts.utils import get_user_today
from core.http import api_login_required
from core.pagination import paginate

from . import services
from .badges import BADGES
from .models import Badge, PointsEntry


@require_GET
@api_login_required
def status(request: HttpRequest) -> JsonResponse:
    """
    Points, streaks and earned badges for the signed-in user.

    A streak whose user missed a day reads as 0 from here on.
    """
    profile = services.get_profile(request.user)
    services.refresh_streak(profile, get_user_today(request.user))

    data = profile.to_dict()
    data['badges'] = [b.to_dict() for b in Badge.objects.filter(user=request.user)]
    return JsonResponse({'success': True, 'data': data})


@require_GET
@api_login_required
def badges(request: HttpRequest) -> JsonResponse:
    """The badge catalogue, each marked with whether the user has earned it."""
    earned = dict(Badge.objects.filter(user=request.user).values_list('type', 'earned_at'))
    data = []
    for badge in BADGES:
        item = badge.to_dict()
        item['earned'] = badge.type in earned
        item['earnedAt'] = earned[badge.type].isoformat() if badge.type in earned else None
        data.append(item)
    return JsonResponse({'success': True, 'data': data})


@require_GET
@api_login_required
@paginate()
def points_history(request: HttpRequest):
    entries = PointsEntry.objects.filter(user=request.user)
    source = request.GET.get('source')
    if source:
        entries = entries.filter(source=source)

    return {
        'data': [e.to_dict() for e in request.pagination.slice(entries)],
        'total': entries.count(),
    }
