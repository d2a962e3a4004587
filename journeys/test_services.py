"""Tests for journeys/services.py and journeys/design.py"""
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import IntegrityError
from django.test import TestCase

from journeys import services
from journeys.design import import_journeys_from_dict, validate_journey_design
from journeys.models import Journey, JourneyProgress

User = get_user_model()


def make_journey(slug='communication-basics', duration_days=3, **kwargs):
    return Journey.objects.create(
        slug=slug,
        title=kwargs.pop('title', slug.replace('-', ' ').title()),
        duration_days=duration_days,
        **kwargs
    )


class StartJourneyTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username='a@example.com', email='a@example.com', password='pw')
        self.journey = make_journey()

    def test_start_creates_progress_at_day_one(self):
        progress = services.start_journey(self.user, self.journey)

        self.assertEqual(progress.current_day, 1)
        self.assertEqual(progress.reflections, {})
        self.assertIsNone(progress.completed_at)

    def test_start_twice_raises_integrity_error(self):
        first = services.start_journey(self.user, self.journey)
        services.submit_reflection(first, 1, 'cipher', 'iv')

        with self.assertRaises(IntegrityError):
            services.start_journey(self.user, self.journey)

        # The existing record is not overwritten
        self.assertEqual(JourneyProgress.objects.count(), 1)
        first.refresh_from_db()
        self.assertEqual(first.current_day, 2)
        self.assertIn('1', first.reflections)

    def test_start_logs_event(self):
        with self.assertLogs('journeys.events', level='INFO') as logs:
            services.start_journey(self.user, self.journey)
        self.assertIn('JOURNEY_START', logs.output[0])


class SubmitReflectionTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username='a@example.com', email='a@example.com', password='pw')
        self.journey = make_journey(duration_days=3)
        self.progress = services.start_journey(self.user, self.journey)

    def test_submit_current_day_stores_entry_and_advances(self):
        progress = services.submit_reflection(self.progress, 1, 'cipher-1', 'iv-1')

        self.assertEqual(progress.current_day, 2)
        entry = progress.reflections['1']
        self.assertEqual(entry['reflection'], 'cipher-1')
        self.assertEqual(entry['iv'], 'iv-1')
        self.assertTrue(entry['completed'])
        self.assertIn('timestamp', entry)

    def test_resubmitting_same_day_replaces_entry(self):
        services.submit_reflection(self.progress, 1, 'first', 'iv-a')
        progress = services.submit_reflection(self.progress, 1, 'second', 'iv-b')

        self.assertEqual(list(progress.reflections.keys()), ['1'])
        self.assertEqual(progress.reflections['1']['reflection'], 'second')
        self.assertEqual(progress.reflections['1']['iv'], 'iv-b')
        # Resubmitting a past day does not advance again
        self.assertEqual(progress.current_day, 2)

    def test_future_day_is_rejected(self):
        with self.assertRaises(ValidationError):
            services.submit_reflection(self.progress, 2, 'cipher', 'iv')

    def test_day_zero_is_rejected(self):
        with self.assertRaises(ValidationError):
            services.submit_reflection(self.progress, 0, 'cipher', 'iv')

    def test_missing_iv_is_rejected(self):
        with self.assertRaises(ValidationError):
            services.submit_reflection(self.progress, 1, 'cipher', '')

    def test_last_day_completes_journey_once(self):
        for day in (1, 2, 3):
            progress = services.submit_reflection(self.progress, day, f'cipher-{day}', 'iv')

        self.assertEqual(progress.current_day, 4)
        self.assertIsNotNone(progress.completed_at)
        completed_at = progress.completed_at

        # Editing an earlier day after completion keeps the first completion time
        progress = services.submit_reflection(self.progress, 3, 'edited', 'iv')
        self.assertEqual(progress.completed_at, completed_at)
        self.assertEqual(progress.current_day, 4)

    def test_completion_logs_events(self):
        services.submit_reflection(self.progress, 1, 'c', 'iv')
        services.submit_reflection(self.progress, 2, 'c', 'iv')
        with self.assertLogs('journeys.events', level='INFO') as logs:
            services.submit_reflection(self.progress, 3, 'c', 'iv')

        output = '\n'.join(logs.output)
        self.assertIn('REFLECTION_SUBMIT', output)
        self.assertIn('DAY_COMPLETE', output)
        self.assertIn('JOURNEY_COMPLETE', output)


class AdvanceAndCompleteTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username='a@example.com', email='a@example.com', password='pw')
        self.journey = make_journey(duration_days=1)
        self.progress = services.start_journey(self.user, self.journey)

    def test_advance_day_increments_and_touches_activity(self):
        before = self.progress.last_activity
        services.advance_day(self.progress)
        self.progress.refresh_from_db()
        self.assertEqual(self.progress.current_day, 2)
        self.assertGreaterEqual(self.progress.last_activity, before)

    def test_complete_requires_day_past_duration(self):
        self.assertFalse(services.complete_journey(self.progress))
        self.assertIsNone(self.progress.completed_at)

        services.advance_day(self.progress)
        self.assertTrue(services.complete_journey(self.progress))
        self.assertFalse(services.complete_journey(self.progress))


class ReflectionSchemaTests(TestCase):
    def setUp(self):
        user = User.objects.create_user(username='a@example.com', email='a@example.com', password='pw')
        self.progress = JourneyProgress(user=user, journey=make_journey())

    def test_entry_without_iv_fails_clean(self):
        self.progress.reflections = {'1': {'reflection': 'x', 'completed': True, 'timestamp': 'now'}}
        with self.assertRaises(ValidationError) as ctx:
            self.progress.full_clean()
        self.assertIn('reflections', ctx.exception.message_dict)

    def test_non_numeric_day_key_fails_clean(self):
        self.progress.reflections = {'day1': {'reflection': 'x', 'iv': 'y', 'completed': True, 'timestamp': 'now'}}
        with self.assertRaises(ValidationError):
            self.progress.full_clean()


class SummariesTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username='a@example.com', email='a@example.com', password='pw')
        self.alpha = make_journey('alpha', title='Alpha')
        self.beta = make_journey('beta', title='Beta')
        self.gamma = make_journey('gamma', title='Gamma')

    def test_started_journeys_come_first_most_recent_first(self):
        beta = services.start_journey(self.user, self.beta)
        gamma = services.start_journey(self.user, self.gamma)
        services.submit_reflection(beta, 1, 'c', 'iv')

        summaries = services.journey_summaries(self.user)

        self.assertEqual([s['id'] for s in summaries], ['beta', 'gamma', 'alpha'])
        self.assertTrue(summaries[0]['started'])
        self.assertEqual(summaries[0]['completedDays'], 1)
        self.assertEqual(summaries[0]['currentDay'], 2)
        self.assertFalse(summaries[2]['started'])
        self.assertEqual(summaries[2]['currentDay'], 0)

    def test_current_journey_skips_completed(self):
        one_day = make_journey('one-day', duration_days=1)
        finished = services.start_journey(self.user, one_day)
        ongoing = services.start_journey(self.user, self.alpha)
        services.submit_reflection(finished, 1, 'c', 'iv')

        self.assertEqual(services.current_journey(self.user).pk, ongoing.pk)


class JourneyDesignImportTests(TestCase):
    def make_design(self):
        return {
            "journeys": [
                {"id": "trust", "title": "Building Trust", "duration": 7, "category": "relationship"},
                {"id": "goals", "title": "Shared Goals", "description": "Plan together", "duration": 5},
            ]
        }

    def test_valid_design_returns_empty_list(self):
        self.assertEqual(validate_journey_design(self.make_design()), [])

    def test_missing_duration_returns_error(self):
        data = self.make_design()
        del data["journeys"][0]["duration"]
        errors = validate_journey_design(data)
        self.assertEqual(len(errors), 1)
        self.assertIn("duration", errors[0])

    def test_import_creates_then_updates(self):
        created, updated = import_journeys_from_dict(self.make_design())
        self.assertEqual(len(created), 2)
        self.assertEqual(updated, [])

        data = self.make_design()
        data["journeys"][0]["duration"] = 10
        created, updated = import_journeys_from_dict(data)
        self.assertEqual(created, [])
        self.assertEqual(len(updated), 2)
        self.assertEqual(Journey.objects.get(slug="trust").duration_days, 10)

    def test_invalid_design_raises_value_error(self):
        with self.assertRaises(ValueError):
            import_journeys_from_dict({"journeys": [{"id": "x"}]})

    def test_route_names_are_rejected_as_ids(self):
        data = self.make_design()
        data["journeys"][0]["id"] = "summaries"

        errors = validate_journey_design(data)

        self.assertEqual(len(errors), 1)
        self.assertIn("journeys/0/id", errors[0])
        with self.assertRaises(ValueError):
            import_journeys_from_dict(data)
        self.assertFalse(Journey.objects.filter(slug="summaries").exists())


class JourneyModelTests(TestCase):
    def test_route_names_are_reserved(self):
        for slug in ('start', 'current', 'summaries'):
            journey = Journey(slug=slug, title='Reserved', duration_days=3)
            with self.assertRaises(ValidationError):
                journey.full_clean()
