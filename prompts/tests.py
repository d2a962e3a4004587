"""
Tests for the prompts app.

Covers:
- Prompt of the day selection and caching
- Prompt immutability (only `active` may change)
- Response submission validation
- Paginated prompt listing
"""
import json
from datetime import date
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.test import TestCase, Client
from django.urls import reverse

from .models import Prompt, PromptResponse

User = get_user_model()


class PromptModelTests(TestCase):
    def setUp(self):
        self.prompt = Prompt.objects.create(
            prompt_id='p-001',
            text='What made you smile together this week?',
            category=Prompt.Category.RELATIONSHIP,
        )

    def test_deactivating_is_allowed(self):
        self.prompt.active = False
        self.prompt.save()
        self.prompt.refresh_from_db()
        self.assertFalse(self.prompt.active)

    def test_changing_text_is_rejected(self):
        self.prompt.text = 'Something else'
        with self.assertRaises(ValidationError) as ctx:
            self.prompt.save()
        self.assertIn('text', ctx.exception.message_dict)

        self.prompt.refresh_from_db()
        self.assertEqual(self.prompt.text, 'What made you smile together this week?')

    def test_changing_category_fails_full_clean(self):
        self.prompt.category = Prompt.Category.GOALS
        with self.assertRaises(ValidationError):
            self.prompt.full_clean()

    def test_for_date_rotates_by_ordinal(self):
        Prompt.objects.create(prompt_id='p-002', text='Second', category='daily')
        day = date(2025, 3, 1)
        expected = ['p-001', 'p-002'][day.toordinal() % 2]
        self.assertEqual(Prompt.objects.for_date(day).prompt_id, expected)

    def test_for_date_ignores_inactive(self):
        self.prompt.active = False
        self.prompt.save()
        self.assertIsNone(Prompt.objects.for_date(date(2025, 3, 1)))


class TodayPromptViewTests(TestCase):
    def setUp(self):
        cache.clear()
        self.client = Client()
        self.url = reverse('prompts:today_prompt')

    def test_returns_prompt_envelope(self):
        Prompt.objects.create(prompt_id='p-001', text='Share a memory', category='daily')

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(set(body['data'].keys()), {'id', 'text', 'date', 'category'})
        self.assertEqual(body['data']['id'], 'p-001')

    def test_no_active_prompt_returns_404(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.json()['success'])

    def test_cache_outage_still_serves_prompt(self):
        Prompt.objects.create(prompt_id='p-001', text='Share a memory', category='daily')
        with patch('core.cache.cache') as mock_cache:
            mock_cache.get.side_effect = ConnectionError('redis down')
            mock_cache.set.side_effect = ConnectionError('redis down')
            response = self.client.get(self.url)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['id'], 'p-001')

    def test_new_prompt_invalidates_cached_choice(self):
        self.client.get(self.url)  # 404, nothing cached
        Prompt.objects.create(prompt_id='p-001', text='First', category='daily')
        self.assertEqual(self.client.get(self.url).json()['data']['id'], 'p-001')

        Prompt.objects.filter(prompt_id='p-001').update(active=False)
        Prompt.objects.create(prompt_id='p-002', text='Second', category='daily')
        self.assertEqual(self.client.get(self.url).json()['data']['id'], 'p-002')


class PromptListViewTests(TestCase):
    def setUp(self):
        for i in range(12):
            Prompt.objects.create(
                prompt_id=f'p-{i:03d}',
                text=f'Prompt {i}',
                category='goals' if i % 2 else 'daily',
            )

    def test_list_is_paginated(self):
        response = self.client.get(reverse('prompts:prompt_list'), {'page': 2, 'limit': 5})
        body = response.json()

        self.assertEqual(len(body['data']), 5)
        self.assertEqual(body['data'][0]['id'], 'p-005')
        self.assertEqual(body['pagination'], {
            'total': 12, 'page': 2, 'limit': 5, 'pages': 3, 'hasNext': True, 'hasPrev': True,
        })

    def test_category_filter(self):
        response = self.client.get(reverse('prompts:prompt_list'), {'category': 'goals'})
        body = response.json()
        self.assertEqual(body['pagination']['total'], 6)
        self.assertTrue(all(p['category'] == 'goals' for p in body['data']))


class SubmitResponseViewTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            username='test@example.com',
            email='test@example.com',
            password='testpass123'
        )
        self.prompt = Prompt.objects.create(prompt_id='p-001', text='Share a memory', category='daily')
        self.client = Client()
        self.client.login(username='test@example.com', password='testpass123')
        self.url = reverse('prompts:submit_response')

    def post_json(self, data):
        return self.client.post(self.url, json.dumps(data), content_type='application/json')

    def test_missing_prompt_id_returns_400(self):
        response = self.post_json({'response': 'Our first date'})

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body['success'])
        self.assertEqual(body['message'], 'Response and promptId are required')

    def test_blank_response_returns_400(self):
        response = self.post_json({'response': '   ', 'promptId': 'p-001'})
        self.assertEqual(response.status_code, 400)

    def test_unknown_prompt_returns_404(self):
        response = self.post_json({'response': 'Hi', 'promptId': 'missing'})
        self.assertEqual(response.status_code, 404)

    def test_submit_echoes_payload(self):
        response = self.post_json({'response': '  Our first date  ', 'promptId': 'p-001'})

        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['response'], 'Our first date')
        self.assertEqual(data['promptId'], 'p-001')
        self.assertIn('createdAt', data)
        self.assertEqual(PromptResponse.objects.filter(user=self.user).count(), 1)

    def test_requires_login(self):
        self.client.logout()
        response = self.post_json({'response': 'Hi', 'promptId': 'p-001'})
        self.assertEqual(response.status_code, 401)

    def test_my_responses(self):
        self.post_json({'response': 'One', 'promptId': 'p-001'})
        response = self.client.get(reverse('prompts:my_responses'))
        body = response.json()
        self.assertEqual(body['pagination']['total'], 1)
        self.assertEqual(body['data'][0]['response'], 'One')
