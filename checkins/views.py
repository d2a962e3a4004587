from datetime import date, timedelta
from typing import Iterable

from django.db.models import Avg
from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET, require_POST

from accounts.utils import get_user_today
from core.http import api_login_required, invalid_form, json_error, parse_json_body
from core.pagination import paginate
from .forms import DailyLogForm, HistoryFilterForm
from .models import DailyLog

STATS_WINDOW_DAYS = 30


def calculate_streak(log_dates: Iterable[date], today: date) -> int:
    """
    Count consecutive logged days ending today or yesterday.

    A missing today does not break the streak until the day is over.
    """
    streak = 0
    current = today
    for log_date in sorted(set(log_dates), reverse=True):
        if (current - log_date).days <= 1:
            streak += 1
            current = log_date
        else:
            break
    return streak


@require_POST
@api_login_required
def create_daily_log(request: HttpRequest) -> JsonResponse:
    """
    Path: /api/dailyLog
    Body: {"action": string, "mood": 1-5, "reflection"?: string, "date"?: "YYYY-MM-DD"}
    """
    form = DailyLogForm(parse_json_body(request))
    if not form.is_valid():
        return invalid_form(form)

    today = get_user_today(request.user)
    log_date = form.cleaned_data.get('date') or today
    if log_date > today:
        return json_error('Cannot log a future date', status=400)

    if DailyLog.objects.filter(user=request.user, date=log_date).exists():
        return json_error('Already logged today', status=400)

    log = form.save(commit=False)
    log.user = request.user
    log.date = log_date
    log.save()

    return JsonResponse({
        'success': True,
        'message': 'Daily log submitted successfully',
        'data': log.to_dict(),
    }, status=201)


@require_GET
@api_login_required
def today_log(request: HttpRequest) -> JsonResponse:
    """Whether the user has logged on their local today."""
    today = get_user_today(request.user)
    log = DailyLog.objects.filter(user=request.user, date=today).first()
    if log is None:
        return JsonResponse({'success': True, 'exists': False})
    return JsonResponse({'success': True, 'exists': True, 'log': log.to_dict()})


@require_GET
@api_login_required
@paginate(default_limit=30)
def log_history(request: HttpRequest):
    filters = HistoryFilterForm(request.GET)
    if not filters.is_valid():
        return invalid_form(filters)

    logs = DailyLog.objects.filter(user=request.user)
    if filters.cleaned_data.get('startDate'):
        logs = logs.filter(date__gte=filters.cleaned_data['startDate'])
    if filters.cleaned_data.get('endDate'):
        logs = logs.filter(date__lte=filters.cleaned_data['endDate'])

    return {
        'data': [log.to_dict() for log in request.pagination.slice(logs)],
        'total': logs.count(),
    }


@require_GET
@api_login_required
def log_stats(request: HttpRequest) -> JsonResponse:
    """Totals, average mood and current streak over the last 30 days."""
    today = get_user_today(request.user)
    logs = DailyLog.objects.filter(
        user=request.user,
        date__gte=today - timedelta(days=STATS_WINDOW_DAYS),
    )
    average = logs.aggregate(avg=Avg('mood'))['avg'] or 0

    return JsonResponse({
        'success': True,
        'data': {
            'totalLogs': logs.count(),
            'averageMood': round(average, 2),
            'streak': calculate_streak(logs.values_list('date', flat=True), today),
        },
    })
