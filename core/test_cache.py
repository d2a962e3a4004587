from unittest.mock import patch

from django.test import SimpleTestCase

from .cache import delete_cached, get_cached, set_cached


class CacheHelperTests(SimpleTestCase):
    def test_round_trip(self):
        set_cached('tests:value', {'a': 1}, expiry_seconds=60)
        self.assertEqual(get_cached('tests:value'), {'a': 1})

        delete_cached('tests:value')
        self.assertIsNone(get_cached('tests:value'))

    @patch('core.cache.cache')
    def test_outage_is_a_miss(self, mock_cache):
        mock_cache.get.side_effect = ConnectionError('redis down')
        mock_cache.set.side_effect = ConnectionError('redis down')
        mock_cache.delete.side_effect = ConnectionError('redis down')

        with self.assertLogs('core.cache', level='ERROR'):
            self.assertIsNone(get_cached('tests:value'))
            set_cached('tests:value', 1)
            delete_cached('tests:value')

    @patch('core.cache.cache')
    def test_no_expiry_by_default(self, mock_cache):
        set_cached('tests:value', 1)
        mock_cache.set.assert_called_once_with('tests:value', 1, timeout=None)
