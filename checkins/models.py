from django.db import models
from django.contrib.auth import get_user_model
from django.core.validators import MinValueValidator, MaxValueValidator

User = get_user_model()


class DailyLog(models.Model):
    """
    One entry per user per local day:
    1. The action the couple took today
    2. Mood (1-5)
    3. An optional short reflection
    """
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='daily_logs')
    date = models.DateField(help_text="Day of the entry in the user's timezone")
    action = models.CharField(max_length=500, help_text="What did you do for your relationship today?")
    reflection = models.TextField(blank=True, help_text="How did it go? (optional)")
    mood = models.IntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        help_text="How do you feel today? (1-5)"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ['user', 'date']
        ordering = ['-date']
        indexes = [
            models.Index(fields=['user', 'date'], name='dailylog_user_date_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.user.email} - {self.date}"

    def to_dict(self) -> dict:
        return {
            'id': self.pk,
            'date': self.date.isoformat(),
            'action': self.action,
            'reflection': self.reflection,
            'mood': self.mood,
            'createdAt': self.created_at.isoformat(),
            'updatedAt': self.updated_at.isoformat(),
        }
