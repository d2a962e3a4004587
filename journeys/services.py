"""
Journey progress operations.

A progress record starts on day 1 with no reflections. Each submitted
reflection is stored under its day number (a resubmission replaces that
day's entry), the current day advances when today's day is submitted, and the
journey is completed once the current day passes the journey's duration.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from .events import JourneyEvent, log_event
from .models import Journey, JourneyProgress

logger = logging.getLogger(__name__)


def start_journey(user, journey: Journey) -> JourneyProgress:
    """
    Create the progress record for (user, journey) at day 1.

    Raises:
        IntegrityError: If the user already started this journey. The existing
            record is left untouched.
    """
    with transaction.atomic():
        progress = JourneyProgress.objects.create(user=user, journey=journey)

    log_event(JourneyEvent.START, user.id, journey.slug, journey_title=journey.title)
    return progress


def advance_day(progress: JourneyProgress, save: bool = True) -> JourneyProgress:
    progress.current_day += 1
    progress.last_activity = timezone.now()
    if save:
        progress.save(update_fields=['current_day', 'last_activity'])
    return progress


def complete_journey(progress: JourneyProgress, save: bool = True) -> bool:
    """
    Mark the journey completed if the current day has passed its duration.

    Returns True only on the call that actually completes it; completion is
    recorded once.
    """
    if progress.completed_at is not None:
        return False
    if progress.current_day <= progress.journey.duration_days:
        return False

    progress.completed_at = timezone.now()
    if save:
        progress.save(update_fields=['completed_at'])
    return True


def submit_reflection(progress: JourneyProgress, day: int, reflection: str, iv: str) -> JourneyProgress:
    """
    Store the encrypted reflection for `day`.

    `day` must be between 1 and the current day (capped at the journey's
    duration). Submitting the current day advances the journey; submitting an
    earlier day only replaces that day's entry.

    Raises:
        ValidationError: On a missing reflection/IV or a day out of range.
    """
    if not reflection or not iv:
        raise ValidationError('Reflection and iv are required')

    with transaction.atomic():
        progress = (
            JourneyProgress.objects
            .select_for_update()
            .select_related('journey', 'user')
            .get(pk=progress.pk)
        )
        journey = progress.journey
        last_open_day = min(progress.current_day, journey.duration_days)
        if day < 1 or day > last_open_day:
            raise ValidationError(f'Day must be between 1 and {last_open_day}')

        now = timezone.now()
        progress.reflections[str(day)] = {
            'reflection': reflection,
            'iv': iv,
            'completed': True,
            'timestamp': now.isoformat(),
        }
        progress.last_activity = now

        day_completed = day == progress.current_day
        if day_completed:
            advance_day(progress, save=False)
        journey_completed = complete_journey(progress, save=False)

        progress.full_clean()
        progress.save()

    log_event(
        JourneyEvent.REFLECTION_SUBMIT, progress.user_id, journey.slug,
        day=day, reflection_length=len(reflection),
    )
    if day_completed:
        log_event(JourneyEvent.DAY_COMPLETE, progress.user_id, journey.slug, day=day)
    if journey_completed:
        log_event(
            JourneyEvent.JOURNEY_COMPLETE, progress.user_id, journey.slug,
            total_days=journey.duration_days,
        )
    return progress


def get_progress(user, journey_slug: str) -> Optional[JourneyProgress]:
    return (
        JourneyProgress.objects
        .select_related('journey')
        .filter(user=user, journey__slug=journey_slug)
        .first()
    )


def current_journey(user) -> Optional[JourneyProgress]:
    """The in-progress journey the user touched most recently."""
    return (
        JourneyProgress.objects
        .select_related('journey')
        .filter(user=user, completed_at__isnull=True)
        .order_by('-last_activity')
        .first()
    )


def journey_summaries(user) -> list[dict]:
    """
    One summary per active journey, plus any inactive journey the user has
    started. Started journeys come first, most recently active first; the
    rest follow by title.
    """
    progress_by_journey = {
        p.journey_id: p
        for p in JourneyProgress.objects.filter(user=user).select_related('journey')
    }
    journeys = {j.id: j for j in Journey.objects.active()}
    for progress in progress_by_journey.values():
        journeys.setdefault(progress.journey_id, progress.journey)

    def sort_key(journey):
        progress = progress_by_journey.get(journey.id)
        if progress is None:
            return (1, 0, journey.title)
        return (0, -progress.last_activity.timestamp(), journey.title)

    summaries = []
    for journey in sorted(journeys.values(), key=sort_key):
        progress = progress_by_journey.get(journey.id)
        summaries.append({
            **journey.to_dict(),
            'started': progress is not None,
            'currentDay': progress.current_day if progress else 0,
            'completedDays': len(progress.completed_days) if progress else 0,
            'isComplete': progress.is_complete if progress else False,
            'startedAt': progress.started_at.isoformat() if progress else None,
            'lastActivity': progress.last_activity.isoformat() if progress else None,
        })
    return summaries
