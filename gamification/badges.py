"""
Badge catalogue.

Each badge has a requirement checked against the user's GamificationProfile
and the set of badge types already earned. Power Couple is checked last so
that badges earned in the same pass count towards it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .models import GamificationProfile


@dataclass(frozen=True)
class BadgeRequirement:
    type: str
    name: str
    description: str
    icon: str
    check: Callable[[GamificationProfile, set], bool]

    def to_dict(self) -> dict:
        return {
            'type': self.type,
            'name': self.name,
            'description': self.description,
            'icon': self.icon,
        }


def _earned_all_others(profile: GamificationProfile, earned: set) -> bool:
    return all(badge.type in earned for badge in BADGES if badge.type != 'POWER_COUPLE')


BADGES = [
    BadgeRequirement(
        'FIRST_STEPS', 'First Steps', 'Complete your first daily prompt', '🌟',
        lambda profile, earned: profile.daily_responses >= 1,
    ),
    BadgeRequirement(
        'STREAK_CHAMPION', 'Streak Champion', 'Maintain a 7-day streak', '🔥',
        lambda profile, earned: profile.current_streak >= 7,
    ),
    BadgeRequirement(
        'RELATIONSHIP_GURU', 'Relationship Guru', 'Earn 1000 points', '💝',
        lambda profile, earned: profile.points >= 1000,
    ),
    BadgeRequirement(
        'STREAK_KING', 'Streak King', 'Maintain a 30-day streak', '👑',
        lambda profile, earned: profile.current_streak >= 30,
    ),
    BadgeRequirement(
        'DAILY_DEVOTION', 'Daily Devotion', 'Complete 30 daily prompts', '❤️',
        lambda profile, earned: profile.daily_responses >= 30,
    ),
    BadgeRequirement(
        'MOOD_MASTER', 'Mood Master', 'Track your mood on 14 days', '😊',
        lambda profile, earned: profile.mood_entries >= 14,
    ),
    BadgeRequirement(
        'POWER_COUPLE', 'Power Couple', 'Earn all other badges', '💑',
        _earned_all_others,
    ),
]

BADGES_BY_TYPE = {badge.type: badge for badge in BADGES}


def get_badge(badge_type: str) -> Optional[BadgeRequirement]:
    return BADGES_BY_TYPE.get(badge_type)


def check_for_new_badges(profile: GamificationProfile, earned: set) -> list[BadgeRequirement]:
    """Badges the profile now qualifies for that are not in `earned`."""
    earned = set(earned)
    new = []
    for badge in BADGES:
        if badge.type not in earned and badge.check(profile, earned):
            earned.add(badge.type)
            new.append(badge)
    return new
