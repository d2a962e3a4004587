import logging

from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST

from accounts.utils import get_user_today
from core.cache import get_cached, set_cached
from core.http import api_login_required, json_error, parse_json_body
from core.pagination import paginate

from .models import Prompt, PromptResponse
from .signals import TODAY_CACHE_SECONDS, today_cache_key

logger = logging.getLogger(__name__)


@require_GET
def today_prompt(request: HttpRequest) -> JsonResponse:
    """
    Prompt of the day.

    Signed-in users get the prompt for their own local date.
    Response: {"success": true, "data": {"id", "text", "date", "category"}}
    """
    if request.user.is_authenticated:
        today = get_user_today(request.user)
    else:
        today = timezone.localdate()

    key = today_cache_key(today)
    data = get_cached(key)
    if data is None:
        prompt = Prompt.objects.for_date(today)
        if prompt is None:
            return json_error('No prompt available today', status=404)
        data = prompt.to_dict(today)
        set_cached(key, data, TODAY_CACHE_SECONDS)

    return JsonResponse({'success': True, 'data': data})


@require_GET
@paginate()
def prompt_list(request: HttpRequest):
    prompts = Prompt.objects.active()
    category = request.GET.get('category')
    if category:
        prompts = prompts.filter(category=category)

    return {
        'data': [p.to_dict() for p in request.pagination.slice(prompts)],
        'total': prompts.count(),
    }


@require_POST
@api_login_required
def submit_response(request: HttpRequest) -> JsonResponse:
    """
    Path: /api/prompt/response
    Body: {"response": string, "promptId": string}
    """
    data = parse_json_body(request)
    response_text = str(data.get('response') or '').strip()
    prompt_id = str(data.get('promptId') or '').strip()

    if not response_text or not prompt_id:
        return json_error('Response and promptId are required', status=400)

    prompt = Prompt.objects.filter(prompt_id=prompt_id).first()
    if prompt is None:
        return json_error('Prompt not found', status=404)

    prompt_response = PromptResponse.objects.create(
        user=request.user,
        prompt=prompt,
        response=response_text,
    )
    logger.info(f"User {request.user.id} answered prompt {prompt.prompt_id}")

    return JsonResponse({
        'success': True,
        'message': 'Response submitted successfully',
        'data': prompt_response.to_dict(),
    }, status=201)


@require_GET
@api_login_required
@paginate()
def my_responses(request: HttpRequest):
    responses = PromptResponse.objects.filter(user=request.user).select_related('prompt')
    return {
        'data': [r.to_dict() for r in request.pagination.slice(responses)],
        'total': responses.count(),
    }
