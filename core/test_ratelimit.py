from unittest.mock import MagicMock, patch

from django.test import TestCase, Client, override_settings
from django.urls import reverse

from .ratelimit import API_POLICY, RatePolicy, hit, reset_limiter

TIGHT_POLICY = RatePolicy(scope='tests', rate='2/minute', message='Slow down.')


@override_settings(RATELIMIT_ENABLED=True, RATELIMIT_STORAGE_URI='memory://')
class RateLimitTests(TestCase):
    def setUp(self):
        reset_limiter()

    def tearDown(self):
        reset_limiter()

    def test_hit_counts_per_key(self):
        self.assertTrue(hit(TIGHT_POLICY, '1.1.1.1').allowed)
        state = hit(TIGHT_POLICY, '1.1.1.1')
        self.assertTrue(state.allowed)
        self.assertEqual(state.remaining, 0)
        self.assertFalse(hit(TIGHT_POLICY, '1.1.1.1').allowed)

        # Other clients keep their own window
        self.assertTrue(hit(TIGHT_POLICY, '2.2.2.2').allowed)

    def test_storage_failure_lets_requests_through(self):
        limiter = MagicMock()
        limiter.hit.side_effect = ConnectionError('redis down')
        with patch('core.ratelimit.get_limiter', return_value=limiter):
            with self.assertLogs('core.ratelimit', level='ERROR'):
                self.assertIsNone(hit(TIGHT_POLICY, '1.1.1.1'))

    def test_api_responses_carry_headers(self):
        response = Client().get(reverse('core:csrf_token'))

        self.assertEqual(response['RateLimit-Limit'], '100')
        self.assertEqual(response['RateLimit-Remaining'], '99')

    def test_api_limit_returns_429(self):
        policy = RatePolicy(scope='api', rate='3/minute', message=API_POLICY.message)
        for _ in range(3):
            hit(policy, '127.0.0.1')
        with patch('core.middleware.API_POLICY', policy):
            response = Client().get(reverse('core:csrf_token'))

        self.assertEqual(response.status_code, 429)
        self.assertEqual(response.json(), {
            'success': False,
            'message': 'Too many requests from this IP, please try again later.',
        })
        self.assertIn('Retry-After', response)

    def test_rate_limited_response_keeps_security_headers(self):
        policy = RatePolicy(scope='api', rate='1/minute', message=API_POLICY.message)
        hit(policy, '127.0.0.1')
        with patch('core.middleware.API_POLICY', policy):
            response = Client().get(reverse('prompts:prompt_list'))

        self.assertEqual(response.status_code, 429)
        self.assertIn("default-src 'self'", response['Content-Security-Policy'])
        self.assertEqual(response['X-XSS-Protection'], '1; mode=block')
        self.assertIn('Permissions-Policy', response)
        self.assertEqual(response['X-Content-Type-Options'], 'nosniff')

    def test_non_api_paths_are_not_limited(self):
        response = Client().get(reverse('health_check:health_check'))
        self.assertNotIn('RateLimit-Limit', response)

    @override_settings(RATELIMIT_ENABLED=False)
    def test_disabled(self):
        response = Client().get(reverse('core:csrf_token'))
        self.assertNotIn('RateLimit-Limit', response)
