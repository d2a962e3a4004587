from unittest.mock import patch

from django.db import OperationalError
from django.test import TestCase, Client, override_settings
from django.urls import reverse


class HealthCheckTests(TestCase):
    def setUp(self):
        self.client = Client()

    def test_healthy(self):
        response = self.client.get(reverse('health_check:health_check'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'healthy')
        self.assertEqual(response.json()['cache'], 'connected')

    @patch('health_check.views.cache')
    def test_cache_outage_is_reported_but_not_fatal(self, mock_cache):
        mock_cache.set.side_effect = ConnectionError('redis down')

        response = self.client.get(reverse('health_check:health_check'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['cache'], 'unavailable')

    @patch('health_check.views.connection')
    def test_database_outage_is_unhealthy(self, mock_connection):
        mock_connection.ensure_connection.side_effect = OperationalError('no database')

        response = self.client.get(reverse('health_check:health_check'))

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()['status'], 'unhealthy')

    @override_settings(EXPOSE_ERROR_DETAILS=False)
    @patch('health_check.views.connection')
    def test_database_error_text_hidden_when_details_disabled(self, mock_connection):
        mock_connection.ensure_connection.side_effect = OperationalError('password authentication failed')

        response = self.client.get(reverse('health_check:health_check'))

        self.assertEqual(response.status_code, 500)
        self.assertNotIn('error', response.json())
