import logging

from django.core.exceptions import ValidationError
from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET, require_POST

from core.cache import get_cached, set_cached
from core.http import api_login_required, invalid_form, json_error, parse_json_body

from . import services
from .forms import ReflectionForm, StartJourneyForm
from .models import Journey
from .signals import CATALOGUE_CACHE_KEY, CATALOGUE_CACHE_SECONDS

logger = logging.getLogger(__name__)


@require_GET
def journey_list(request: HttpRequest) -> JsonResponse:
    """Catalogue of active journeys (cached)."""
    journeys = get_cached(CATALOGUE_CACHE_KEY)
    if journeys is None:
        journeys = [journey.to_dict() for journey in Journey.objects.active()]
        set_cached(CATALOGUE_CACHE_KEY, journeys, CATALOGUE_CACHE_SECONDS)
    return JsonResponse({'success': True, 'data': journeys})


@require_GET
@api_login_required
def journey_detail(request: HttpRequest, journey_id: str) -> JsonResponse:
    journey = Journey.objects.filter(slug=journey_id).first()
    if journey is None:
        return json_error('Journey not found', status=404)

    progress = services.get_progress(request.user, journey_id)
    return JsonResponse({
        'success': True,
        'data': {
            **journey.to_dict(),
            'progress': progress.to_dict() if progress else None,
        },
    })


@require_POST
@api_login_required
def start_journey(request: HttpRequest) -> JsonResponse:
    """
    Path: /api/journey/start
    Body: {"journeyId": "<slug>"}

    Starting a journey twice answers 409; the first progress record is kept.
    """
    form = StartJourneyForm(parse_json_body(request))
    if not form.is_valid():
        return invalid_form(form)

    journey = Journey.objects.active().filter(slug=form.cleaned_data['journeyId']).first()
    if journey is None:
        return json_error('Journey not found', status=404)

    progress = services.start_journey(request.user, journey)
    return JsonResponse({
        'success': True,
        'message': 'Journey started successfully',
        'data': progress.to_dict(),
    }, status=201)


@require_POST
@api_login_required
def submit_reflection(request: HttpRequest, journey_id: str) -> JsonResponse:
    """
    Path: /api/journey/<journeyId>/reflections
    Body: {"day": int, "reflection": "<ciphertext>", "iv": "<iv>"}
    """
    form = ReflectionForm(parse_json_body(request))
    if not form.is_valid():
        return invalid_form(form)

    progress = services.get_progress(request.user, journey_id)
    if progress is None:
        return json_error('Journey progress not found', status=404)

    try:
        progress = services.submit_reflection(
            progress,
            day=form.cleaned_data['day'],
            reflection=form.cleaned_data['reflection'],
            iv=form.cleaned_data['iv'],
        )
    except ValidationError as e:
        return json_error(e.messages[0], status=400)

    return JsonResponse({'success': True, 'data': progress.to_dict()})


@require_GET
@api_login_required
def journey_progress(request: HttpRequest, journey_id: str) -> JsonResponse:
    progress = services.get_progress(request.user, journey_id)
    if progress is None:
        return json_error('Journey progress not found', status=404)
    return JsonResponse({'success': True, 'data': progress.to_dict()})


@require_GET
@api_login_required
def current_journey(request: HttpRequest) -> JsonResponse:
    """The in-progress journey touched most recently, or null."""
    progress = services.current_journey(request.user)
    return JsonResponse({'success': True, 'data': progress.to_dict() if progress else None})


@require_GET
@api_login_required
def journey_summaries(request: HttpRequest) -> JsonResponse:
    return JsonResponse({'success': True, 'data': services.journey_summaries(request.user)})
