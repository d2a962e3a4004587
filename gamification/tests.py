"""
Tests for points, streaks and badges.

Covers:
- Points awarded by prompt responses and daily logs
- Streak extension, same-day repeats and resets
- Streak bonus and badges
- Status, badge catalogue and history endpoints
"""
from datetime import timedelta
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import TestCase, Client
from django.urls import reverse

from accounts.utils import get_user_today
from checkins.models import DailyLog
from prompts.models import Prompt, PromptResponse

from . import services
from .models import Badge, GamificationProfile, PointsEntry

User = get_user_model()


class GamificationTestCase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            username='test@example.com',
            email='test@example.com',
            password='testpass123'
        )
        self.prompt = Prompt.objects.create(prompt_id='p1', text='What made you smile today?', category='daily')
        self.today = get_user_today(self.user)

    def respond(self):
        return PromptResponse.objects.create(user=self.user, prompt=self.prompt, response='Breakfast together')

    def set_profile(self, **fields):
        profile = services.get_profile(self.user)
        for name, value in fields.items():
            setattr(profile, name, value)
        profile.save()
        return profile


class ActivityTests(GamificationTestCase):
    def test_first_prompt_response(self):
        self.respond()

        profile = GamificationProfile.objects.get(user=self.user)
        self.assertEqual(profile.daily_responses, 1)
        self.assertEqual(profile.current_streak, 1)
        self.assertEqual(profile.longest_streak, 1)
        self.assertEqual(profile.last_active_date, self.today)
        # 10 for the response, 25 for First Steps
        self.assertEqual(profile.points, 35)
        self.assertEqual(list(Badge.objects.values_list('type', flat=True)), ['FIRST_STEPS'])
        self.assertEqual(
            sorted(PointsEntry.objects.values_list('source', flat=True)),
            ['badge_earned', 'prompt_response'],
        )

    def test_daily_log_counts_mood_and_streak(self):
        DailyLog.objects.create(user=self.user, date=self.today, action='Walk', mood=4)

        profile = GamificationProfile.objects.get(user=self.user)
        self.assertEqual(profile.mood_entries, 1)
        self.assertEqual(profile.current_streak, 1)
        self.assertEqual(profile.points, 5)

    def test_editing_a_log_earns_nothing(self):
        log = DailyLog.objects.create(user=self.user, date=self.today, action='Walk', mood=4)
        log.mood = 5
        log.save()

        self.assertEqual(PointsEntry.objects.filter(user=self.user).count(), 1)

    def test_past_log_does_not_touch_streak(self):
        DailyLog.objects.create(user=self.user, date=self.today - timedelta(days=3), action='Walk', mood=4)

        profile = GamificationProfile.objects.get(user=self.user)
        self.assertEqual(profile.current_streak, 0)
        self.assertIsNone(profile.last_active_date)
        self.assertEqual(profile.points, 5)


class StreakTests(GamificationTestCase):
    def test_same_day_keeps_streak(self):
        self.respond()
        self.respond()

        profile = GamificationProfile.objects.get(user=self.user)
        self.assertEqual(profile.current_streak, 1)
        self.assertEqual(profile.daily_responses, 2)

    def test_consecutive_day_extends_streak(self):
        self.set_profile(current_streak=3, longest_streak=3, last_active_date=self.today - timedelta(days=1))

        self.respond()

        profile = GamificationProfile.objects.get(user=self.user)
        self.assertEqual(profile.current_streak, 4)
        self.assertEqual(profile.longest_streak, 4)

    def test_missed_day_restarts_streak(self):
        self.set_profile(current_streak=5, longest_streak=9, last_active_date=self.today - timedelta(days=2))

        self.respond()

        profile = GamificationProfile.objects.get(user=self.user)
        self.assertEqual(profile.current_streak, 1)
        self.assertEqual(profile.longest_streak, 9)

    def test_seventh_day_earns_bonus_and_badge(self):
        self.set_profile(
            current_streak=6, longest_streak=6, daily_responses=6,
            last_active_date=self.today - timedelta(days=1),
        )
        Badge.objects.create(user=self.user, type='FIRST_STEPS')

        result = services.record_activity(self.user, PointsEntry.Source.PROMPT_RESPONSE)

        self.assertEqual(result.profile.current_streak, 7)
        self.assertEqual([b.type for b in result.new_badges], ['STREAK_CHAMPION'])
        # 10 response + 50 bonus + 25 badge
        self.assertEqual(result.points_awarded, 85)
        self.assertTrue(PointsEntry.objects.filter(user=self.user, source='streak_bonus', points=50).exists())

    def test_refresh_zeroes_broken_streak(self):
        profile = self.set_profile(current_streak=4, longest_streak=4, last_active_date=self.today - timedelta(days=2))

        services.refresh_streak(profile, self.today)

        profile.refresh_from_db()
        self.assertEqual(profile.current_streak, 0)
        self.assertEqual(profile.longest_streak, 4)

    def test_refresh_keeps_streak_until_day_is_over(self):
        profile = self.set_profile(current_streak=4, longest_streak=4, last_active_date=self.today - timedelta(days=1))

        services.refresh_streak(profile, self.today)

        self.assertEqual(profile.current_streak, 4)


class BadgeTests(GamificationTestCase):
    def test_badge_points_can_unlock_points_badge(self):
        self.set_profile(points=970)

        result = services.record_activity(self.user, PointsEntry.Source.PROMPT_RESPONSE)

        # 980 after the response, 1005 after First Steps
        self.assertEqual([b.type for b in result.new_badges], ['FIRST_STEPS', 'RELATIONSHIP_GURU'])
        self.assertEqual(result.profile.points, 1030)

    def test_power_couple_after_all_others(self):
        for badge_type in ['FIRST_STEPS', 'STREAK_CHAMPION', 'RELATIONSHIP_GURU', 'STREAK_KING', 'DAILY_DEVOTION']:
            Badge.objects.create(user=self.user, type=badge_type)
        self.set_profile(mood_entries=13)

        result = services.record_daily_log(
            DailyLog(user=self.user, date=self.today, action='Walk', mood=3),
        )

        self.assertEqual([b.type for b in result.new_badges], ['MOOD_MASTER', 'POWER_COUPLE'])

    def test_badge_is_announced_after_commit(self):
        with patch('gamification.services.queue_user_notification') as mock_queue:
            with self.captureOnCommitCallbacks(execute=True):
                self.respond()

        mock_queue.assert_called_once()
        self.assertEqual(mock_queue.call_args.args[0], self.user.id)
        self.assertEqual(mock_queue.call_args.args[3], {'type': 'badge_earned', 'badge': 'FIRST_STEPS'})


class GamificationApiTests(GamificationTestCase):
    def setUp(self):
        super().setUp()
        self.client = Client()
        self.client.login(username='test@example.com', password='testpass123')

    def test_status_for_new_user(self):
        data = self.client.get(reverse('gamification:status')).json()['data']

        self.assertEqual(data['points'], 0)
        self.assertEqual(data['currentStreak'], 0)
        self.assertEqual(data['badges'], [])

    def test_status_reports_broken_streak_as_zero(self):
        self.set_profile(current_streak=3, longest_streak=3, last_active_date=self.today - timedelta(days=5))

        data = self.client.get(reverse('gamification:status')).json()['data']

        self.assertEqual(data['currentStreak'], 0)
        self.assertEqual(data['longestStreak'], 3)

    def test_status_lists_earned_badges(self):
        self.respond()

        badges = self.client.get(reverse('gamification:status')).json()['data']['badges']

        self.assertEqual(badges[0]['type'], 'FIRST_STEPS')
        self.assertEqual(badges[0]['name'], 'First Steps')
        self.assertIn('earnedAt', badges[0])

    def test_badge_catalogue_marks_earned(self):
        self.respond()

        data = self.client.get(reverse('gamification:badges')).json()['data']

        by_type = {b['type']: b for b in data}
        self.assertTrue(by_type['FIRST_STEPS']['earned'])
        self.assertFalse(by_type['POWER_COUPLE']['earned'])
        self.assertIsNone(by_type['POWER_COUPLE']['earnedAt'])

    def test_history_is_paginated_and_filterable(self):
        self.respond()
        DailyLog.objects.create(user=self.user, date=self.today, action='Walk', mood=4)

        body = self.client.get(reverse('gamification:history')).json()
        self.assertEqual(body['pagination']['total'], 3)

        body = self.client.get(reverse('gamification:history'), {'source': 'daily_log'}).json()
        self.assertEqual([e['points'] for e in body['data']], [5])

    def test_requires_login(self):
        self.client.logout()
        self.assertEqual(self.client.get(reverse('gamification:status')).status_code, 401)
