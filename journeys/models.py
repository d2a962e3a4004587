from __future__ import annotations

import jsonschema
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

User = get_user_model()

# Path segments under /api/journey/ that are routes of their own
RESERVED_JOURNEY_IDS = ('start', 'current', 'summaries')


class JourneyManager(models.Manager):
    def active(self):
        return self.filter(is_active=True)


class Journey(models.Model):
    """A multi-day curriculum. Owns the total day count its progress records complete against."""
    slug = models.SlugField(
        max_length=100,
        unique=True,
        help_text="Public identifier used by the API as journeyId"
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    duration_days = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Number of days in the journey"
    )
    category = models.CharField(max_length=50, blank=True)
    is_active = models.BooleanField(
        default=True,
        help_text="Inactive journeys are hidden from the catalogue and cannot be started"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = JourneyManager()

    class Meta:
        ordering = ['title']

    def __str__(self) -> str:
        return f"{self.title} ({self.duration_days} days)"

    def to_dict(self) -> dict:
        return {
            'id': self.slug,
            'title': self.title,
            'description': self.description,
            'duration': self.duration_days,
            'category': self.category,
        }

    def clean(self):
        super().clean()
        if self.slug in RESERVED_JOURNEY_IDS:
            raise ValidationError({'slug': f"'{self.slug}' is reserved."})


class JourneyProgress(models.Model):
    """
    One user's progress through one journey.

    `reflections` maps the day number (as a string) to the client-encrypted
    entry for that day::

        {"1": {"reflection": "<ciphertext>", "iv": "<iv>",
               "completed": true, "timestamp": "2025-01-01T08:00:00+00:00"}}

    The server stores the ciphertext and IV as given and never decrypts them.
    """
    REFLECTIONS_SCHEMA = {
        "type": "object",
        "patternProperties": {
            "^[1-9][0-9]*$": {
                "type": "object",
                "properties": {
                    "reflection": {"type": "string", "minLength": 1},
                    "iv": {"type": "string", "minLength": 1},
                    "completed": {"type": "boolean"},
                    "timestamp": {"type": "string"},
                },
                "required": ["reflection", "iv", "completed", "timestamp"],
                "additionalProperties": False,
            }
        },
        "additionalProperties": False,
    }

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='journey_progress')
    journey = models.ForeignKey(Journey, on_delete=models.CASCADE, related_name='progress')
    current_day = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        help_text="Next day to complete; exceeds the duration once the journey is finished"
    )
    reflections = models.JSONField(default=dict, blank=True)
    started_at = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)
    last_activity = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-last_activity']
        constraints = [
            models.UniqueConstraint(fields=['user', 'journey'], name='unique_user_journey'),
        ]
        verbose_name_plural = 'journey progress'

    def __str__(self) -> str:
        return f"{self.user.email} - {self.journey.slug} (day {self.current_day})"

    def clean(self):
        super().clean()
        try:
            jsonschema.validate(instance=self.reflections, schema=self.REFLECTIONS_SCHEMA)
        except jsonschema.ValidationError as e:
            path = '/'.join(str(p) for p in e.path)
            raise ValidationError({'reflections': f"{e.message} (at path: {path})"})

    @property
    def is_complete(self) -> bool:
        return self.completed_at is not None

    @property
    def completed_days(self) -> list[int]:
        return sorted(int(day) for day, entry in self.reflections.items() if entry.get('completed'))

    def to_dict(self) -> dict:
        return {
            'id': self.pk,
            'journeyId': self.journey.slug,
            'currentDay': self.current_day,
            'totalDays': self.journey.duration_days,
            'reflections': self.reflections,
            'completedDays': self.completed_days,
            'isComplete': self.is_complete,
            'startedAt': self.started_at.isoformat(),
            'completedAt': self.completed_at.isoformat() if self.completed_at else None,
            'lastActivity': self.last_activity.isoformat(),
        }
