import logging
from functools import wraps

from django.contrib.auth import get_user_model
from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_http_methods, require_POST
from firebase_admin import exceptions as firebase_exceptions

from core.http import api_login_required, invalid_form, json_error, parse_json_body

from . import services
from .forms import DeviceTokenForm, SendNotificationForm, SendTopicNotificationForm, TopicForm
from .models import DeviceToken

logger = logging.getLogger(__name__)
User = get_user_model()


def push_errors_as_json(view_func):
    """Map Firebase configuration and transport errors to JSON responses."""
    @wraps(view_func)
    def _wrapped_view(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except services.NotificationsNotConfigured:
            return json_error('Push notifications are not configured', status=503)
        except firebase_exceptions.FirebaseError as e:
            logger.error(f"Firebase error on {request.path}: {e}")
            return json_error('Notification service error', status=502)
    return _wrapped_view


def staff_required(view_func):
    @wraps(view_func)
    def _wrapped_view(request, *args, **kwargs):
        if not request.user.is_staff:
            return json_error('Staff access required', status=403)
        return view_func(request, *args, **kwargs)
    return _wrapped_view


@require_http_methods(['POST', 'DELETE'])
@api_login_required
def devices(request: HttpRequest) -> JsonResponse:
    """
    Register (POST) or unregister (DELETE) an FCM token for the signed-in user.

    Body: {"token": string, "platform"?: "web" | "ios" | "android"}
    """
    form = DeviceTokenForm(parse_json_body(request))
    if not form.is_valid():
        return invalid_form(form)
    token = form.cleaned_data['token']

    if request.method == 'DELETE':
        removed, _ = DeviceToken.objects.filter(user=request.user, token=token).delete()
        return JsonResponse({'success': True, 'removed': removed})

    # A token moves to whoever registered it last (shared browser).
    device, created = DeviceToken.objects.update_or_create(
        token=token,
        defaults={
            'user': request.user,
            'platform': form.cleaned_data.get('platform') or DeviceToken.Platform.WEB,
        },
    )
    return JsonResponse({'success': True, 'data': device.to_dict()}, status=201 if created else 200)


def _user_tokens(user) -> list[str]:
    return list(DeviceToken.objects.filter(user=user).values_list('token', flat=True))


@require_POST
@api_login_required
@push_errors_as_json
def subscribe_topic(request: HttpRequest) -> JsonResponse:
    form = TopicForm(parse_json_body(request))
    if not form.is_valid():
        return invalid_form(form)

    tokens = _user_tokens(request.user)
    if not tokens:
        return json_error('No registered devices', status=404)

    subscribed = services.subscribe_to_topic(tokens, form.cleaned_data['topic'])
    return JsonResponse({'success': True, 'subscribed': subscribed})


@require_POST
@api_login_required
@push_errors_as_json
def unsubscribe_topic(request: HttpRequest) -> JsonResponse:
    form = TopicForm(parse_json_body(request))
    if not form.is_valid():
        return invalid_form(form)

    tokens = _user_tokens(request.user)
    if not tokens:
        return json_error('No registered devices', status=404)

    unsubscribed = services.unsubscribe_from_topic(tokens, form.cleaned_data['topic'])
    return JsonResponse({'success': True, 'unsubscribed': unsubscribed})


@require_POST
@api_login_required
@staff_required
def send_notification(request: HttpRequest) -> JsonResponse:
    """Queue a push to one user's devices (staff only)."""
    data = parse_json_body(request)
    form = SendNotificationForm(data)
    if not form.is_valid():
        return invalid_form(form)

    user_id = form.cleaned_data['userId']
    if not User.objects.filter(pk=user_id).exists():
        return json_error('User not found', status=404)
    if not DeviceToken.objects.filter(user_id=user_id).exists():
        return json_error('User has no registered devices', status=404)

    extra = data.get('data')
    services.queue_user_notification(
        user_id,
        form.cleaned_data['title'],
        form.cleaned_data['body'],
        extra if isinstance(extra, dict) else None,
        image_url=form.cleaned_data['imageUrl'] or None,
    )
    return JsonResponse({'success': True, 'message': 'Notification queued'}, status=202)


@require_POST
@api_login_required
@staff_required
@push_errors_as_json
def send_topic_notification(request: HttpRequest) -> JsonResponse:
    data = parse_json_body(request)
    form = SendTopicNotificationForm(data)
    if not form.is_valid():
        return invalid_form(form)

    extra = data.get('data')
    payload = services.NotificationPayload(
        title=form.cleaned_data['title'],
        body=form.cleaned_data['body'],
        data=extra if isinstance(extra, dict) else {},
        image_url=form.cleaned_data['imageUrl'] or None,
    )
    message_id = services.send_to_topic(form.cleaned_data['topic'], payload)
    return JsonResponse({'success': True, 'messageId': message_id})
