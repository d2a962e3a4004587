from django.db import models
from django.contrib.auth import get_user_model
from django.utils.crypto import get_random_string
from django.utils.translation import gettext_lazy as _
import pytz

User = get_user_model()

TIMEZONE_CHOICES = [(tz, tz) for tz in pytz.common_timezones]


class UserProfile(models.Model):
    """Extended user profile with notification preferences, timezone and forum role."""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    timezone = models.CharField(
        max_length=50,
        choices=TIMEZONE_CHOICES,
        default='UTC',
        help_text="User's timezone for accurate daily log dates"
    )
    push_daily_reminder = models.BooleanField(
        default=False,
        help_text="Send a push notification when today's log is still missing"
    )
    is_moderator = models.BooleanField(
        default=False,
        help_text="Can approve and hide forum posts"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Profile for {self.user.email}"

    def to_dict(self):
        return {
            'timezone': self.timezone,
            'pushDailyReminder': self.push_daily_reminder,
            'isModerator': self.is_moderator,
            'createdAt': self.created_at.isoformat(),
            'updatedAt': self.updated_at.isoformat(),
        }


def user_to_dict(user) -> dict:
    """Public representation of a user as returned by the auth and profile endpoints."""
    profile, _ = UserProfile.objects.get_or_create(user=user)
    return {
        'id': user.id,
        'email': user.email,
        'firstName': user.first_name,
        'lastName': user.last_name,
        'profile': profile.to_dict(),
    }


INVITE_CODE_CHARS = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'


def generate_invite_code() -> str:
    return get_random_string(8, allowed_chars=INVITE_CODE_CHARS)


class PartnerInvite(models.Model):
    """An emailed invitation for a partner to join; accepted when they register with its code."""
    class Status(models.TextChoices):
        PENDING = 'pending', _('Pending')
        ACCEPTED = 'accepted', _('Accepted')

    sender = models.ForeignKey(User, on_delete=models.CASCADE, related_name='sent_invites')
    recipient = models.EmailField()
    message = models.CharField(max_length=500, blank=True)
    code = models.CharField(max_length=8, unique=True, default=generate_invite_code)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    accepted_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='accepted_invites'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    accepted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"{self.sender.email} -> {self.recipient} ({self.status})"

    def to_dict(self) -> dict:
        return {
            'id': self.pk,
            'recipient': self.recipient,
            'message': self.message,
            'inviteCode': self.code,
            'status': self.status,
            'createdAt': self.created_at.isoformat(),
            'acceptedAt': self.accepted_at.isoformat() if self.accepted_at else None,
        }
