"""
Tests for push notifications.

Firebase is never contacted: the app lookup and the messaging calls are
patched in every test that would reach them.
"""
import json
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from django.contrib.auth import get_user_model
from django.test import TestCase, Client
from django.urls import reverse
from firebase_admin import messaging

from . import services
from .models import DeviceToken

User = get_user_model()


def multicast_response(*results):
    responses = [
        SimpleNamespace(success=exc is None, exception=exc)
        for exc in results
    ]
    return SimpleNamespace(
        responses=responses,
        success_count=sum(1 for r in responses if r.success),
    )


@patch('notifications.services.get_firebase_app', return_value=MagicMock())
class SendToUserTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username='a@example.com', email='a@example.com', password='pw')
        DeviceToken.objects.create(user=self.user, token='good-token')
        DeviceToken.objects.create(user=self.user, token='dead-token', platform=DeviceToken.Platform.IOS)

    def test_no_devices_sends_nothing(self, mock_app):
        other = User.objects.create_user(username='b@example.com', email='b@example.com', password='pw')
        with patch('notifications.services.messaging.send_each_for_multicast') as mock_send:
            self.assertEqual(services.send_to_user(other.id, 'Hi', 'There'), 0)
        mock_send.assert_not_called()

    def test_invalid_tokens_are_removed(self, mock_app):
        def deliver(message, app=None):
            return multicast_response(*[
                messaging.UnregisteredError('Token is gone') if token == 'dead-token' else None
                for token in message.tokens
            ])

        with patch('notifications.services.messaging.send_each_for_multicast', side_effect=deliver) as mock_send:
            delivered = services.send_to_user(self.user.id, 'Reminder', 'Log your day', {'type': 'daily_reminder'})

        self.assertEqual(delivered, 1)
        message = mock_send.call_args.args[0]
        self.assertEqual(sorted(message.tokens), ['dead-token', 'good-token'])
        self.assertEqual(message.data, {'type': 'daily_reminder'})
        self.assertEqual(list(DeviceToken.objects.values_list('token', flat=True)), ['good-token'])
        self.assertIsNotNone(DeviceToken.objects.get(token='good-token').last_used_at)

    def test_transient_failure_keeps_token(self, mock_app):
        error = messaging.QuotaExceededError('Slow down')
        response = multicast_response(error, error)
        with patch('notifications.services.messaging.send_each_for_multicast', return_value=response):
            self.assertEqual(services.send_to_user(self.user.id, 'Hi', 'There'), 0)

        self.assertEqual(DeviceToken.objects.filter(user=self.user).count(), 2)

    def test_image_url_reaches_notification(self, mock_app):
        with patch('notifications.services.messaging.send_each_for_multicast',
                   return_value=multicast_response(None, None)) as mock_send:
            services.send_to_user(self.user.id, 'New journey', 'Take a look', image_url='https://cdn.example.com/j.png')

        message = mock_send.call_args.args[0]
        self.assertEqual(message.notification.image, 'https://cdn.example.com/j.png')

    def test_data_values_are_stringified(self, mock_app):
        payload = services.NotificationPayload(title='t', body='b', data={'postId': 5, 'approved': True})
        self.assertEqual(payload.string_data(), {'postId': '5', 'approved': 'True'})


class FirebaseConfigurationTests(TestCase):
    def test_missing_credentials_raise(self):
        with patch('notifications.services.firebase_admin.get_app', side_effect=ValueError):
            with self.assertRaises(services.NotificationsNotConfigured):
                services.get_firebase_app()


class NotificationApiTestCase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            username='test@example.com',
            email='test@example.com',
            password='testpass123'
        )
        self.client = Client()
        self.client.login(username='test@example.com', password='testpass123')

    def post_json(self, url, data):
        return self.client.post(url, json.dumps(data), content_type='application/json')


class DeviceTests(NotificationApiTestCase):
    def test_register_device(self):
        response = self.post_json(reverse('notifications:devices'), {'token': 'abc', 'platform': 'android'})

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['data']['platform'], 'android')
        self.assertTrue(DeviceToken.objects.filter(user=self.user, token='abc').exists())

    def test_register_same_token_twice_is_idempotent(self):
        self.post_json(reverse('notifications:devices'), {'token': 'abc'})
        response = self.post_json(reverse('notifications:devices'), {'token': 'abc'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(DeviceToken.objects.count(), 1)

    def test_token_moves_to_latest_user(self):
        other = User.objects.create_user(username='o@example.com', email='o@example.com', password='pw')
        DeviceToken.objects.create(user=other, token='shared')

        self.post_json(reverse('notifications:devices'), {'token': 'shared'})

        self.assertEqual(DeviceToken.objects.get(token='shared').user, self.user)

    def test_unregister_device(self):
        DeviceToken.objects.create(user=self.user, token='abc')
        response = self.client.delete(
            reverse('notifications:devices'),
            json.dumps({'token': 'abc'}),
            content_type='application/json',
        )

        self.assertEqual(response.json()['removed'], 1)
        self.assertFalse(DeviceToken.objects.exists())

    def test_missing_token_rejected(self):
        response = self.post_json(reverse('notifications:devices'), {})
        self.assertEqual(response.status_code, 400)
        self.assertIn('token', response.json()['errors'])

    def test_requires_login(self):
        self.client.logout()
        response = self.post_json(reverse('notifications:devices'), {'token': 'abc'})
        self.assertEqual(response.status_code, 401)


class TopicTests(NotificationApiTestCase):
    def test_no_devices_404(self):
        response = self.post_json(reverse('notifications:subscribe_topic'), {'topic': 'weekly'})
        self.assertEqual(response.status_code, 404)

    def test_not_configured_503(self):
        DeviceToken.objects.create(user=self.user, token='abc')
        with patch('notifications.services.firebase_admin.get_app', side_effect=ValueError):
            response = self.post_json(reverse('notifications:subscribe_topic'), {'topic': 'weekly'})

        self.assertEqual(response.status_code, 503)
        self.assertFalse(response.json()['success'])

    @patch('notifications.services.get_firebase_app', return_value=MagicMock())
    def test_subscribe(self, mock_app):
        DeviceToken.objects.create(user=self.user, token='abc')
        result = SimpleNamespace(success_count=1, errors=[])
        with patch('notifications.services.messaging.subscribe_to_topic', return_value=result) as mock_sub:
            response = self.post_json(reverse('notifications:subscribe_topic'), {'topic': 'weekly'})

        self.assertEqual(response.json()['subscribed'], 1)
        self.assertEqual(mock_sub.call_args.args[:2], (['abc'], 'weekly'))

    def test_invalid_topic_name(self):
        response = self.post_json(reverse('notifications:subscribe_topic'), {'topic': 'not a topic!'})
        self.assertEqual(response.status_code, 400)


class StaffSendTests(NotificationApiTestCase):
    def setUp(self):
        super().setUp()
        self.staff = User.objects.create_user(
            username='staff@example.com',
            email='staff@example.com',
            password='staffpass123',
            is_staff=True,
        )

    def test_non_staff_forbidden(self):
        response = self.post_json(reverse('notifications:send_notification'), {
            'userId': self.user.id, 'title': 'Hi', 'body': 'There',
        })
        self.assertEqual(response.status_code, 403)

    @patch('notifications.views.services.queue_user_notification')
    def test_staff_queues_notification(self, mock_queue):
        DeviceToken.objects.create(user=self.user, token='abc')
        self.client.login(username='staff@example.com', password='staffpass123')

        response = self.post_json(reverse('notifications:send_notification'), {
            'userId': self.user.id, 'title': 'Hi', 'body': 'There', 'data': {'type': 'announcement'},
        })

        self.assertEqual(response.status_code, 202)
        mock_queue.assert_called_once_with(self.user.id, 'Hi', 'There', {'type': 'announcement'}, image_url=None)

    @patch('notifications.views.services.queue_user_notification')
    def test_staff_notification_with_image(self, mock_queue):
        DeviceToken.objects.create(user=self.user, token='abc')
        self.client.login(username='staff@example.com', password='staffpass123')

        response = self.post_json(reverse('notifications:send_notification'), {
            'userId': self.user.id, 'title': 'Hi', 'body': 'There', 'imageUrl': 'https://cdn.example.com/hi.png',
        })

        self.assertEqual(response.status_code, 202)
        self.assertEqual(mock_queue.call_args.kwargs['image_url'], 'https://cdn.example.com/hi.png')

    def test_invalid_image_url_rejected(self):
        self.client.login(username='staff@example.com', password='staffpass123')
        response = self.post_json(reverse('notifications:send_notification'), {
            'userId': self.user.id, 'title': 'Hi', 'body': 'There', 'imageUrl': 'not a url',
        })

        self.assertEqual(response.status_code, 400)
        self.assertIn('imageUrl', response.json()['errors'])

    def test_user_without_devices_404(self):
        self.client.login(username='staff@example.com', password='staffpass123')
        response = self.post_json(reverse('notifications:send_notification'), {
            'userId': self.user.id, 'title': 'Hi', 'body': 'There',
        })
        self.assertEqual(response.status_code, 404)

    @patch('notifications.services.get_firebase_app', return_value=MagicMock())
    def test_staff_sends_to_topic(self, mock_app):
        self.client.login(username='staff@example.com', password='staffpass123')
        with patch('notifications.services.messaging.send', return_value='projects/x/messages/1') as mock_send:
            response = self.post_json(reverse('notifications:send_topic_notification'), {
                'topic': 'weekly', 'title': 'New prompt', 'body': 'Check it out',
            })

        self.assertEqual(response.json()['messageId'], 'projects/x/messages/1')
        self.assertEqual(mock_send.call_args.args[0].topic, 'weekly')

    @patch('notifications.services.get_firebase_app', return_value=MagicMock())
    def test_topic_notification_carries_image(self, mock_app):
        self.client.login(username='staff@example.com', password='staffpass123')
        with patch('notifications.services.messaging.send', return_value='projects/x/messages/2') as mock_send:
            self.post_json(reverse('notifications:send_topic_notification'), {
                'topic': 'weekly', 'title': 'New prompt', 'body': 'Check it out',
                'imageUrl': 'https://cdn.example.com/prompt.png',
            })

        self.assertEqual(mock_send.call_args.args[0].notification.image, 'https://cdn.example.com/prompt.png')
