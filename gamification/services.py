"""
Points, streaks and badges.

Activity is recorded on the server when a prompt response or a daily log is
created; clients never post point changes themselves. A streak counts days
(in the user's timezone) with at least one recorded activity: a second
activity on the same day leaves it alone, activity on the day after the last
one extends it, and anything later starts again from 1. Every 7th day of a
streak earns a bonus.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from django.db import transaction

from accounts.utils import get_user_today
from notifications.services import queue_user_notification

from .badges import BadgeRequirement, check_for_new_badges
from .models import Badge, GamificationProfile, PointsEntry

logger = logging.getLogger(__name__)

Source = PointsEntry.Source

POINTS = {
    Source.PROMPT_RESPONSE: 10,
    Source.DAILY_LOG: 5,
    Source.STREAK_BONUS: 50,
    Source.BADGE_EARNED: 25,
}
STREAK_BONUS_EVERY = 7


@dataclass
class ActivityResult:
    profile: GamificationProfile
    points_awarded: int = 0
    new_badges: list[BadgeRequirement] = field(default_factory=list)


def get_profile(user) -> GamificationProfile:
    profile, _ = GamificationProfile.objects.get_or_create(user=user)
    return profile


def streak_is_broken(profile: GamificationProfile, today: date) -> bool:
    """True once a whole day has passed without activity."""
    if profile.last_active_date is None:
        return True
    return profile.last_active_date < today - timedelta(days=1)


def refresh_streak(profile: GamificationProfile, today: date) -> GamificationProfile:
    """Zero a streak whose user missed a day. The longest streak is kept."""
    if profile.current_streak and streak_is_broken(profile, today):
        logger.info(f"Streak of {profile.current_streak} ended for user {profile.user_id}")
        profile.current_streak = 0
        profile.save(update_fields=['current_streak', 'updated_at'])
    return profile


def _extend_streak(profile: GamificationProfile, today: date) -> bool:
    """Count `today` towards the streak. Returns True if the streak changed."""
    if profile.last_active_date == today:
        return False

    if streak_is_broken(profile, today):
        profile.current_streak = 1
    else:
        profile.current_streak += 1
    profile.longest_streak = max(profile.longest_streak, profile.current_streak)
    profile.last_active_date = today
    return True


def _award(profile: GamificationProfile, source: str) -> int:
    points = POINTS[Source(source)]
    PointsEntry.objects.create(user_id=profile.user_id, points=points, source=source)
    profile.points += points
    return points


def record_activity(user, source: str, active_day: Optional[date] = None) -> ActivityResult:
    """
    Award points for one activity and update the streak and badges.

    Args:
        user: The user who did something
        source: PointsEntry.Source of the activity
        active_day: The user-local day the activity belongs to; it only
            counts towards the streak when that day is today.
    """
    today = get_user_today(user)
    if active_day is None:
        active_day = today

    with transaction.atomic():
        get_profile(user)
        profile = GamificationProfile.objects.select_for_update().get(user=user)
        result = ActivityResult(profile=profile)

        if source == Source.PROMPT_RESPONSE:
            profile.daily_responses += 1
        elif source == Source.DAILY_LOG:
            profile.mood_entries += 1
        result.points_awarded += _award(profile, source)

        if active_day == today and _extend_streak(profile, today):
            if profile.current_streak % STREAK_BONUS_EVERY == 0:
                result.points_awarded += _award(profile, Source.STREAK_BONUS)

        earned = set(Badge.objects.filter(user=user).values_list('type', flat=True))
        new_badges = check_for_new_badges(profile, earned)
        # Badge points can unlock further badges
        while new_badges:
            for badge in new_badges:
                Badge.objects.create(user=user, type=badge.type)
                result.points_awarded += _award(profile, Source.BADGE_EARNED)
                earned.add(badge.type)
            result.new_badges.extend(new_badges)
            new_badges = check_for_new_badges(profile, earned)

        profile.save()

    for badge in result.new_badges:
        logger.info(f"User {user.id} earned badge {badge.type}")
        transaction.on_commit(
            lambda badge=badge: queue_user_notification(
                user.id,
                f"{badge.icon} {badge.name}",
                f"You earned a new badge: {badge.description}",
                {'type': 'badge_earned', 'badge': badge.type},
            )
        )

    return result


def record_prompt_response(prompt_response) -> ActivityResult:
    return record_activity(prompt_response.user, Source.PROMPT_RESPONSE)


def record_daily_log(log) -> ActivityResult:
    return record_activity(log.user, Source.DAILY_LOG, active_day=log.date)
