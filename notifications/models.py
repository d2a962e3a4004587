from django.db import models
from django.contrib.auth import get_user_model
from django.utils.translation import gettext_lazy as _

User = get_user_model()


class DeviceToken(models.Model):
    """An FCM registration token for one of the user's browsers or devices."""
    class Platform(models.TextChoices):
        WEB = 'web', _('Web')
        IOS = 'ios', _('iOS')
        ANDROID = 'android', _('Android')

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='device_tokens')
    token = models.CharField(max_length=512, unique=True)
    platform = models.CharField(max_length=20, choices=Platform.choices, default=Platform.WEB)
    created_at = models.DateTimeField(auto_now_add=True)
    last_used_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Last time a push was delivered to this token"
    )

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"{self.user.email} ({self.platform})"

    def to_dict(self) -> dict:
        return {
            'id': self.pk,
            'platform': self.platform,
            'createdAt': self.created_at.isoformat(),
            'lastUsedAt': self.last_used_at.isoformat() if self.last_used_at else None,
        }
