import json
import logging

from django.conf import settings
from django.contrib.auth import authenticate, get_user_model, login, logout
from django.contrib.auth.forms import PasswordResetForm, SetPasswordForm
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import ValidationError
from django.core.mail import send_mail
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.template.loader import render_to_string
from django.utils.encoding import force_str
from django.utils.http import urlsafe_base64_decode
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from checkins.models import DailyLog
from core.http import api_login_required, get_bool, invalid_form, json_error, parse_json_body
from core.ratelimit import AUTH_POLICY, INVITE_POLICY, PASSWORD_RESET_POLICY, rate_limit
from forum.models import ForumPost
from gamification.models import Badge, PointsEntry
from gamification.services import get_profile
from journeys.models import JourneyProgress
from prompts.models import PromptResponse

from .forms import (
    LoginForm,
    PartnerInviteForm,
    PasswordResetConfirmForm,
    PasswordResetRequestForm,
    ProfileUpdateForm,
    RegisterForm,
)
from .models import PartnerInvite, UserProfile, user_to_dict

logger = logging.getLogger(__name__)
User = get_user_model()


@require_POST
@rate_limit(AUTH_POLICY)
def register(request: HttpRequest) -> JsonResponse:
    """
    Create an account and start a session for it.

    Path: /api/auth/register
    Body: {"email", "password", "firstName", "lastName", "timezone"?, "inviteCode"?}
    """
    form = RegisterForm(parse_json_body(request))
    if not form.is_valid():
        return invalid_form(form)

    user = form.save()
    login(request, user, backend='django.contrib.auth.backends.ModelBackend')
    logger.info(f"New user registered: {user.id}")

    return JsonResponse({'success': True, 'data': {'user': user_to_dict(user)}}, status=201)


@require_POST
@rate_limit(AUTH_POLICY)
def login_view(request: HttpRequest) -> JsonResponse:
    """
    Path: /api/auth/login
    Body: {"email", "password"}
    """
    form = LoginForm(parse_json_body(request))
    if not form.is_valid():
        return invalid_form(form)

    user = authenticate(
        request,
        username=form.cleaned_data['email'].lower(),
        password=form.cleaned_data['password'],
    )
    if user is None:
        logger.info(f"Failed login for {form.cleaned_data['email']}")
        return json_error('Invalid email or password', status=401)

    login(request, user)
    return JsonResponse({'success': True, 'data': {'user': user_to_dict(user)}})


@require_POST
def logout_view(request: HttpRequest) -> JsonResponse:
    logout(request)
    return JsonResponse({'success': True})


@require_POST
@rate_limit(PASSWORD_RESET_POLICY)
def password_reset(request: HttpRequest) -> JsonResponse:
    """
    Email a reset link. The answer is the same whether or not the account
    exists so the endpoint does not reveal which emails have accounts.
    """
    form = PasswordResetRequestForm(parse_json_body(request))
    if not form.is_valid():
        return invalid_form(form)

    reset_form = PasswordResetForm({'email': form.cleaned_data['email']})
    if reset_form.is_valid():
        reset_form.save(
            request=request,
            use_https=request.is_secure(),
            from_email=settings.DEFAULT_FROM_EMAIL,
            subject_template_name='accounts/password_reset_subject.txt',
            email_template_name='accounts/password_reset_email.txt',
            extra_email_context={'site_url': settings.SITE_URL},
        )

    return JsonResponse({
        'success': True,
        'message': 'If an account exists for that email, a reset link has been sent.',
    })


def _user_from_uid(uidb64: str):
    try:
        uid = force_str(urlsafe_base64_decode(uidb64))
        return User.objects.get(pk=uid)
    except (TypeError, ValueError, OverflowError, User.DoesNotExist, ValidationError):
        return None


@require_POST
def password_reset_confirm(request: HttpRequest) -> JsonResponse:
    """
    Path: /api/auth/password-reset/confirm
    Body: {"uid", "token", "password"} as delivered in the reset link.
    """
    form = PasswordResetConfirmForm(parse_json_body(request))
    if not form.is_valid():
        return invalid_form(form)

    user = _user_from_uid(form.cleaned_data['uid'])
    if user is None or not default_token_generator.check_token(user, form.cleaned_data['token']):
        return json_error('Invalid or expired reset link', status=400)

    password = form.cleaned_data['password']
    set_form = SetPasswordForm(user, {'new_password1': password, 'new_password2': password})
    if not set_form.is_valid():
        return invalid_form(set_form)

    set_form.save()
    logger.info(f"Password reset completed for user {user.id}")
    return JsonResponse({'success': True, 'message': 'Password has been reset.'})


@require_http_methods(['GET', 'PATCH'])
@api_login_required
def profile(request: HttpRequest) -> JsonResponse:
    """
    Read or update the signed-in user's profile.

    Path: /api/user/profile
    PATCH body (all optional):
    {
        "firstName": string,
        "lastName": string,
        "timezone": string,
        "pushDailyReminder": boolean
    }
    """
    user = request.user

    if request.method == 'PATCH':
        data = parse_json_body(request)
        form = ProfileUpdateForm(data)
        if not form.is_valid():
            return invalid_form(form)

        profile, _ = UserProfile.objects.get_or_create(user=user)

        if 'firstName' in data:
            user.first_name = form.cleaned_data['firstName']
        if 'lastName' in data:
            user.last_name = form.cleaned_data['lastName']
        if data.get('timezone'):
            profile.timezone = form.cleaned_data['timezone']

        push_daily_reminder = get_bool(data, 'pushDailyReminder')
        if push_daily_reminder is not None:
            profile.push_daily_reminder = push_daily_reminder

        user.save()
        profile.save()

    return JsonResponse({'success': True, 'data': user_to_dict(user)})


@require_POST
@api_login_required
@rate_limit(INVITE_POLICY)
def send_invite(request: HttpRequest) -> JsonResponse:
    """
    Invite a partner by email.

    Path: /api/user/invite
    Body: {"recipient": email, "message"?: string, "method"?: "email"}
    The partner joins by registering with the emailed invite code.
    """
    user = request.user
    form = PartnerInviteForm(parse_json_body(request))
    if not form.is_valid():
        return invalid_form(form)

    recipient = form.cleaned_data['recipient'].lower()
    if recipient == user.email.lower():
        return json_error('You cannot invite yourself', status=400)

    invite = PartnerInvite.objects.create(
        sender=user,
        recipient=recipient,
        message=form.cleaned_data['message'],
    )
    context = {
        'sender_name': user.get_full_name() or 'A friend',
        'invite': invite,
        'site_url': settings.SITE_URL,
    }
    send_mail(
        subject=render_to_string('accounts/partner_invite_subject.txt', context).strip(),
        message=render_to_string('accounts/partner_invite_email.txt', context),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[invite.recipient],
        fail_silently=False,
    )
    logger.info(f"User {user.id} sent partner invite {invite.pk}")

    return JsonResponse({
        'success': True,
        'message': 'Invitation sent successfully',
        'data': invite.to_dict(),
    }, status=201)


@require_GET
@api_login_required
def sent_invites(request: HttpRequest) -> JsonResponse:
    invites = PartnerInvite.objects.filter(sender=request.user)
    return JsonResponse({'success': True, 'data': [i.to_dict() for i in invites]})


@require_GET
@api_login_required
def export_user_data(request: HttpRequest) -> HttpResponse:
    """Export all user data (GDPR compliance)."""
    user = request.user

    data = {
        'user': {
            **user_to_dict(user),
            'dateJoined': user.date_joined.isoformat(),
        },
        'journeys': [p.to_dict() for p in JourneyProgress.objects.filter(user=user).select_related('journey')],
        'dailyLogs': [log.to_dict() for log in DailyLog.objects.filter(user=user)],
        'promptResponses': [r.to_dict() for r in PromptResponse.objects.filter(user=user).select_related('prompt')],
        'forumPosts': [p.to_dict() for p in ForumPost.objects.filter(author=user).with_counts()],
        'gamification': {
            **get_profile(user).to_dict(),
            'badges': [b.to_dict() for b in Badge.objects.filter(user=user)],
            'pointsHistory': [e.to_dict() for e in PointsEntry.objects.filter(user=user)],
        },
        'partnerInvites': [i.to_dict() for i in PartnerInvite.objects.filter(sender=user)],
    }

    # Return as JSON file
    response = HttpResponse(
        json.dumps(data, indent=2),
        content_type='application/json'
    )
    response['Content-Disposition'] = f'attachment; filename="user_data_{user.id}.json"'
    return response


@require_POST
@api_login_required
def delete_account(request: HttpRequest) -> JsonResponse:
    """Delete user account (GDPR compliance - hard delete)."""
    data = parse_json_body(request)
    if data.get('confirm') != 'DELETE':
        return json_error('Please send confirm=DELETE to delete your account.', status=400)

    user = request.user
    logout(request)
    user_id = user.id
    user.delete()  # Cascade delete all related data
    logger.info(f"Deleted account {user_id}")
    return JsonResponse({'success': True, 'message': 'Your account has been permanently deleted.'})
