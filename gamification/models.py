from django.contrib.auth import get_user_model
from django.db import models
from django.utils.translation import gettext_lazy as _

User = get_user_model()


class GamificationProfile(models.Model):
    """
    Running totals for a user:
    1. Points earned from every source
    2. Current and longest daily streak
    3. Activity counters the badges are checked against
    """
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='gamification')
    points = models.PositiveIntegerField(default=0)
    current_streak = models.PositiveIntegerField(default=0)
    longest_streak = models.PositiveIntegerField(default=0)
    daily_responses = models.PositiveIntegerField(default=0, help_text="Prompt responses submitted")
    mood_entries = models.PositiveIntegerField(default=0, help_text="Daily logs with a mood")
    last_active_date = models.DateField(
        null=True,
        blank=True,
        help_text="Last day (user's timezone) that counted towards the streak"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.user.email}: {self.points} points"

    def to_dict(self) -> dict:
        return {
            'points': self.points,
            'currentStreak': self.current_streak,
            'longestStreak': self.longest_streak,
            'dailyResponses': self.daily_responses,
            'moodEntries': self.mood_entries,
            'lastActiveDate': self.last_active_date.isoformat() if self.last_active_date else None,
        }


class PointsEntry(models.Model):
    class Source(models.TextChoices):
        PROMPT_RESPONSE = 'prompt_response', _('Prompt response')
        DAILY_LOG = 'daily_log', _('Daily log')
        STREAK_BONUS = 'streak_bonus', _('Streak bonus')
        BADGE_EARNED = 'badge_earned', _('Badge earned')

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='points_history')
    points = models.PositiveIntegerField()
    source = models.CharField(max_length=20, choices=Source.choices)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name_plural = 'points entries'

    def __str__(self) -> str:
        return f"{self.user.email} +{self.points} ({self.source})"

    def to_dict(self) -> dict:
        return {
            'id': self.pk,
            'points': self.points,
            'source': self.source,
            'createdAt': self.created_at.isoformat(),
        }


class Badge(models.Model):
    """A badge a user has earned; `type` is a key of the badge catalogue."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='badges')
    type = models.CharField(max_length=50)
    earned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ['user', 'type']
        ordering = ['earned_at', 'id']

    def __str__(self) -> str:
        return f"{self.user.email} - {self.type}"

    def to_dict(self) -> dict:
        from .badges import get_badge

        requirement = get_badge(self.type)
        data = requirement.to_dict() if requirement else {'type': self.type}
        data['earnedAt'] = self.earned_at.isoformat()
        return data
