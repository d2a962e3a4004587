from datetime import date

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

User = get_user_model()


class PromptManager(models.Manager):
    def active(self):
        return self.filter(active=True)

    def for_date(self, day: date):
        """
        The active prompt shown on `day`.

        Prompts rotate in `prompt_id` order by the date's ordinal, so every
        user sees the same prompt on the same calendar day.
        """
        prompts = self.active().order_by('prompt_id')
        count = prompts.count()
        if count == 0:
            return None
        return prompts[day.toordinal() % count]


class Prompt(models.Model):
    """
    A daily writing prompt.

    Prompts are immutable once created; the only permitted change is
    toggling `active` to retire one.
    """
    class Category(models.TextChoices):
        RELATIONSHIP = 'relationship', _('Relationship')
        COMMUNICATION = 'communication', _('Communication')
        INTIMACY = 'intimacy', _('Intimacy')
        GOALS = 'goals', _('Goals')
        DAILY = 'daily', _('Daily')

    IMMUTABLE_FIELDS = ('prompt_id', 'text', 'category')

    prompt_id = models.CharField(max_length=100, unique=True)
    text = models.TextField()
    category = models.CharField(max_length=20, choices=Category.choices)
    created_at = models.DateTimeField(auto_now_add=True)
    active = models.BooleanField(default=True)

    objects = PromptManager()

    class Meta:
        ordering = ['prompt_id']

    def __str__(self) -> str:
        return f"{self.prompt_id}: {self.text[:50]}"

    def _changed_immutable_fields(self) -> list[str]:
        if self.pk is None:
            return []
        original = Prompt.objects.filter(pk=self.pk).values(*self.IMMUTABLE_FIELDS).first()
        if original is None:
            return []
        return [field for field in self.IMMUTABLE_FIELDS if original[field] != getattr(self, field)]

    def clean(self):
        super().clean()
        changed = self._changed_immutable_fields()
        if changed:
            raise ValidationError({
                field: 'Prompts cannot be edited after creation; deactivate it and add a new one.'
                for field in changed
            })

    def save(self, *args, **kwargs):
        if self._changed_immutable_fields():
            self.clean()
        super().save(*args, **kwargs)

    def to_dict(self, day: date = None) -> dict:
        data = {
            'id': self.prompt_id,
            'text': self.text,
            'category': self.category,
        }
        if day is not None:
            data['date'] = day.isoformat()
        return data


class PromptResponse(models.Model):
    """A user's answer to a prompt."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='prompt_responses')
    prompt = models.ForeignKey(Prompt, on_delete=models.CASCADE, related_name='responses')
    response = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"{self.user.email} - {self.prompt.prompt_id}"

    def to_dict(self) -> dict:
        return {
            'id': self.pk,
            'response': self.response,
            'promptId': self.prompt.prompt_id,
            'createdAt': self.created_at.isoformat(),
        }
