"""
Tests for the daily log.

Covers:
- One log per user-local day
- Today, history and stats endpoints
- Streak calculation
- The push reminder command
"""
import json
from datetime import date, timedelta
from io import StringIO
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase, Client
from django.urls import reverse

from accounts.utils import get_user_today
from notifications.models import DeviceToken
from .models import DailyLog
from .views import calculate_streak

User = get_user_model()


class CalculateStreakTests(TestCase):
    def test_empty(self):
        self.assertEqual(calculate_streak([], date(2025, 1, 10)), 0)

    def test_consecutive_days_ending_today(self):
        today = date(2025, 1, 10)
        logs = [today, today - timedelta(days=1), today - timedelta(days=2)]
        self.assertEqual(calculate_streak(logs, today), 3)

    def test_streak_survives_until_today_is_over(self):
        today = date(2025, 1, 10)
        logs = [today - timedelta(days=1), today - timedelta(days=2)]
        self.assertEqual(calculate_streak(logs, today), 2)

    def test_gap_breaks_streak(self):
        today = date(2025, 1, 10)
        logs = [today, today - timedelta(days=1), today - timedelta(days=4)]
        self.assertEqual(calculate_streak(logs, today), 2)


class DailyLogApiTestCase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            username='test@example.com',
            email='test@example.com',
            password='testpass123'
        )
        self.client = Client()
        self.client.login(username='test@example.com', password='testpass123')

    def post_log(self, data):
        return self.client.post(
            reverse('checkins:create_daily_log'),
            json.dumps(data),
            content_type='application/json',
        )


class CreateDailyLogTests(DailyLogApiTestCase):
    def test_create_log_for_today(self):
        response = self.post_log({'action': 'Cooked dinner together', 'mood': 4})

        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['date'], get_user_today(self.user).isoformat())
        self.assertEqual(data['mood'], 4)
        self.assertEqual(data['reflection'], '')

    def test_second_log_same_day_rejected(self):
        self.post_log({'action': 'Walk', 'mood': 3})
        response = self.post_log({'action': 'Another walk', 'mood': 5})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Already logged today')
        self.assertEqual(DailyLog.objects.filter(user=self.user).count(), 1)

    def test_mood_out_of_range_rejected(self):
        response = self.post_log({'action': 'Walk', 'mood': 6})
        self.assertEqual(response.status_code, 400)
        self.assertIn('mood', response.json()['errors'])

    def test_missing_action_rejected(self):
        response = self.post_log({'mood': 3})
        self.assertEqual(response.status_code, 400)
        self.assertIn('action', response.json()['errors'])

    def test_backfill_past_date(self):
        yesterday = get_user_today(self.user) - timedelta(days=1)
        response = self.post_log({'action': 'Walk', 'mood': 3, 'date': yesterday.isoformat()})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['data']['date'], yesterday.isoformat())

    def test_future_date_rejected(self):
        tomorrow = get_user_today(self.user) + timedelta(days=1)
        response = self.post_log({'action': 'Walk', 'mood': 3, 'date': tomorrow.isoformat()})
        self.assertEqual(response.status_code, 400)

    def test_requires_login(self):
        self.client.logout()
        response = self.post_log({'action': 'Walk', 'mood': 3})
        self.assertEqual(response.status_code, 401)


class TodayLogTests(DailyLogApiTestCase):
    def test_not_logged(self):
        response = self.client.get(reverse('checkins:today_log'))
        self.assertEqual(response.json()['exists'], False)
        self.assertNotIn('log', response.json())

    def test_logged(self):
        self.post_log({'action': 'Walk', 'mood': 3})
        body = self.client.get(reverse('checkins:today_log')).json()
        self.assertTrue(body['exists'])
        self.assertEqual(body['log']['action'], 'Walk')


class HistoryAndStatsTests(DailyLogApiTestCase):
    def setUp(self):
        super().setUp()
        self.today = get_user_today(self.user)
        for offset, mood in [(0, 5), (1, 4), (2, 2), (5, 3)]:
            DailyLog.objects.create(
                user=self.user,
                date=self.today - timedelta(days=offset),
                action=f'Action {offset}',
                mood=mood,
            )
        # Outside the 30-day stats window
        DailyLog.objects.create(user=self.user, date=self.today - timedelta(days=40), action='Old', mood=1)

    def test_history_is_paginated_newest_first(self):
        response = self.client.get(reverse('checkins:log_history'), {'limit': 2})
        body = response.json()

        self.assertEqual(len(body['data']), 2)
        self.assertEqual(body['data'][0]['date'], self.today.isoformat())
        self.assertEqual(body['pagination']['total'], 5)
        self.assertEqual(body['pagination']['pages'], 3)

    def test_history_date_filters(self):
        start = (self.today - timedelta(days=2)).isoformat()
        end = (self.today - timedelta(days=1)).isoformat()
        response = self.client.get(reverse('checkins:log_history'), {'startDate': start, 'endDate': end})
        self.assertEqual(response.json()['pagination']['total'], 2)

    def test_history_rejects_inverted_range(self):
        response = self.client.get(reverse('checkins:log_history'), {
            'startDate': self.today.isoformat(),
            'endDate': (self.today - timedelta(days=3)).isoformat(),
        })
        self.assertEqual(response.status_code, 400)

    def test_stats(self):
        data = self.client.get(reverse('checkins:log_stats')).json()['data']

        self.assertEqual(data['totalLogs'], 4)
        self.assertEqual(data['averageMood'], 3.5)
        self.assertEqual(data['streak'], 3)

    def test_history_only_shows_own_logs(self):
        other = User.objects.create_user(username='o@example.com', email='o@example.com', password='pw')
        DailyLog.objects.create(user=other, date=self.today, action='Theirs', mood=3)
        response = self.client.get(reverse('checkins:log_history'), {'limit': 100})
        self.assertNotIn('Theirs', [log['action'] for log in response.json()['data']])


class SendDailyRemindersCommandTests(TestCase):
    def setUp(self):
        self.reminded = User.objects.create_user(username='r@example.com', email='r@example.com', password='pw')
        self.reminded.profile.push_daily_reminder = True
        self.reminded.profile.save()
        DeviceToken.objects.create(user=self.reminded, token='token-r')

        self.already_logged = User.objects.create_user(username='l@example.com', email='l@example.com', password='pw')
        self.already_logged.profile.push_daily_reminder = True
        self.already_logged.profile.save()
        DeviceToken.objects.create(user=self.already_logged, token='token-l')
        DailyLog.objects.create(
            user=self.already_logged, date=get_user_today(self.already_logged), action='Done', mood=4,
        )

        # Opted out
        opted_out = User.objects.create_user(username='n@example.com', email='n@example.com', password='pw')
        DeviceToken.objects.create(user=opted_out, token='token-n')

    @patch('checkins.management.commands.send_daily_reminders.queue_user_notification')
    def test_only_opted_in_users_without_log_are_reminded(self, mock_queue):
        out = StringIO()
        call_command('send_daily_reminders', stdout=out)

        mock_queue.assert_called_once()
        self.assertEqual(mock_queue.call_args.args[0], self.reminded.id)
        self.assertIn('Queued 1 daily reminders', out.getvalue())

    @patch('checkins.management.commands.send_daily_reminders.queue_user_notification')
    def test_dry_run_sends_nothing(self, mock_queue):
        out = StringIO()
        call_command('send_daily_reminders', '--dry-run', stdout=out)

        mock_queue.assert_not_called()
        self.assertIn('r@example.com', out.getvalue())
