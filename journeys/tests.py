"""
Tests for the journey API.

Covers:
- Catalogue listing and its cache invalidation
- Starting a journey (including the duplicate start conflict)
- Reflection submission through the API
- Current journey and summaries endpoints
"""
import json
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase, Client
from django.urls import reverse

from .models import Journey, JourneyProgress
from .signals import CATALOGUE_CACHE_KEY

User = get_user_model()


class JourneyApiTestCase(TestCase):
    def setUp(self):
        cache.clear()
        self.user = User.objects.create_user(
            username='test@example.com',
            email='test@example.com',
            password='testpass123'
        )
        self.journey = Journey.objects.create(
            slug='communication-basics',
            title='Communication Basics',
            description='Seven days of better conversations',
            duration_days=2,
            category='communication',
        )
        self.client = Client()
        self.client.login(username='test@example.com', password='testpass123')

    def post_json(self, url, data):
        return self.client.post(url, json.dumps(data), content_type='application/json')


class JourneyCatalogueTests(JourneyApiTestCase):
    def test_lists_active_journeys(self):
        Journey.objects.create(slug='hidden', title='Hidden', duration_days=1, is_active=False)

        response = self.client.get(reverse('journeys:journey_list'))

        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual([j['id'] for j in data], ['communication-basics'])
        self.assertEqual(data[0]['duration'], 2)

    def test_catalogue_is_cached_and_invalidated_on_save(self):
        self.client.get(reverse('journeys:journey_list'))
        self.assertIsNotNone(cache.get(CATALOGUE_CACHE_KEY))

        self.journey.title = 'Renamed'
        self.journey.save()
        self.assertIsNone(cache.get(CATALOGUE_CACHE_KEY))

        response = self.client.get(reverse('journeys:journey_list'))
        self.assertEqual(response.json()['data'][0]['title'], 'Renamed')

    def test_catalogue_served_when_cache_is_down(self):
        with patch('core.cache.cache') as mock_cache:
            mock_cache.get.side_effect = ConnectionError('redis down')
            mock_cache.set.side_effect = ConnectionError('redis down')
            response = self.client.get(reverse('journeys:journey_list'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()['data']), 1)


class StartJourneyViewTests(JourneyApiTestCase):
    def test_start_requires_login(self):
        self.client.logout()
        response = self.post_json(reverse('journeys:start_journey'), {'journeyId': 'communication-basics'})
        self.assertEqual(response.status_code, 401)

    def test_start_creates_progress(self):
        response = self.post_json(reverse('journeys:start_journey'), {'journeyId': 'communication-basics'})

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['data']['currentDay'], 1)
        self.assertEqual(body['data']['reflections'], {})

    def test_unknown_journey_returns_404(self):
        response = self.post_json(reverse('journeys:start_journey'), {'journeyId': 'nope'})
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.json()['success'])

    def test_duplicate_start_returns_409(self):
        self.post_json(reverse('journeys:start_journey'), {'journeyId': 'communication-basics'})
        response = self.post_json(reverse('journeys:start_journey'), {'journeyId': 'communication-basics'})

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()['message'], 'Duplicate value error')
        self.assertEqual(JourneyProgress.objects.filter(user=self.user).count(), 1)


class ReflectionViewTests(JourneyApiTestCase):
    def setUp(self):
        super().setUp()
        self.post_json(reverse('journeys:start_journey'), {'journeyId': 'communication-basics'})
        self.url = reverse('journeys:submit_reflection', args=['communication-basics'])

    def test_submit_reflection(self):
        response = self.post_json(self.url, {'day': 1, 'reflection': 'ciphertext', 'iv': 'abc123'})

        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['currentDay'], 2)
        self.assertEqual(data['reflections']['1']['reflection'], 'ciphertext')
        self.assertEqual(data['completedDays'], [1])

    def test_ciphertext_and_iv_are_stored_verbatim(self):
        response = self.post_json(self.url, {'day': 1, 'reflection': ' Y2lwaGVy\n', 'iv': 'aXY= '})

        entry = response.json()['data']['reflections']['1']
        self.assertEqual(entry['reflection'], ' Y2lwaGVy\n')
        self.assertEqual(entry['iv'], 'aXY= ')

    def test_missing_iv_returns_400(self):
        response = self.post_json(self.url, {'day': 1, 'reflection': 'ciphertext'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('iv', response.json()['errors'])

    def test_future_day_returns_400(self):
        response = self.post_json(self.url, {'day': 2, 'reflection': 'ciphertext', 'iv': 'abc'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Day must be between 1 and 1')

    def test_not_started_returns_404(self):
        Journey.objects.create(slug='other', title='Other', duration_days=3)
        url = reverse('journeys:submit_reflection', args=['other'])
        response = self.post_json(url, {'day': 1, 'reflection': 'c', 'iv': 'i'})
        self.assertEqual(response.status_code, 404)

    def test_completing_last_day_marks_complete(self):
        self.post_json(self.url, {'day': 1, 'reflection': 'c1', 'iv': 'i1'})
        response = self.post_json(self.url, {'day': 2, 'reflection': 'c2', 'iv': 'i2'})

        data = response.json()['data']
        self.assertTrue(data['isComplete'])
        self.assertIsNotNone(data['completedAt'])

    def test_progress_endpoint(self):
        self.post_json(self.url, {'day': 1, 'reflection': 'c1', 'iv': 'i1'})
        response = self.client.get(reverse('journeys:journey_progress', args=['communication-basics']))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['currentDay'], 2)


class CurrentJourneyViewTests(JourneyApiTestCase):
    def test_no_journey_returns_null(self):
        response = self.client.get(reverse('journeys:current_journey'))
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()['data'])

    def test_returns_started_journey(self):
        self.post_json(reverse('journeys:start_journey'), {'journeyId': 'communication-basics'})
        response = self.client.get(reverse('journeys:current_journey'))
        self.assertEqual(response.json()['data']['journeyId'], 'communication-basics')

    def test_summaries(self):
        response = self.client.get(reverse('journeys:journey_summaries'))
        self.assertEqual(response.status_code, 200)
        summary = response.json()['data'][0]
        self.assertEqual(summary['id'], 'communication-basics')
        self.assertFalse(summary['started'])

    def test_detail_includes_progress(self):
        self.post_json(reverse('journeys:start_journey'), {'journeyId': 'communication-basics'})
        response = self.client.get(reverse('journeys:journey_detail', args=['communication-basics']))
        data = response.json()['data']
        self.assertEqual(data['title'], 'Communication Basics')
        self.assertEqual(data['progress']['currentDay'], 1)
