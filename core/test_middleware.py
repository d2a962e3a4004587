from unittest.mock import patch

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import IntegrityError
from django.test import TestCase, Client, override_settings
from django.urls import path, reverse


def raise_integrity_error(request):
    raise IntegrityError('UNIQUE constraint failed')


def raise_validation_error(request):
    raise ValidationError({'title': ['Too short']})


def raise_permission_denied(request):
    raise PermissionDenied


def raise_runtime_error(request):
    raise RuntimeError('boom')


urlpatterns = [
    path('api/errors/integrity', raise_integrity_error),
    path('api/errors/validation', raise_validation_error),
    path('api/errors/permission', raise_permission_denied),
    path('api/errors/runtime', raise_runtime_error),
]


@override_settings(ROOT_URLCONF='core.test_middleware')
class ApiErrorMiddlewareTests(TestCase):
    def setUp(self):
        self.client = Client()

    def test_integrity_error_is_409(self):
        response = self.client.get('/api/errors/integrity')

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()['message'], 'Duplicate value error')
        self.assertFalse(response.json()['success'])

    def test_validation_error_is_400_with_details(self):
        response = self.client.get('/api/errors/validation')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Validation error')
        self.assertEqual(response.json()['error'], {'title': ['Too short']})

    def test_permission_denied_is_403(self):
        self.assertEqual(self.client.get('/api/errors/permission').status_code, 403)

    @patch('core.middleware.sentry_sdk.capture_exception')
    def test_unexpected_error_is_500_and_reported(self, mock_capture):
        with self.assertLogs('core.middleware', level='ERROR'):
            response = self.client.get('/api/errors/runtime')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()['message'], 'Internal server error')
        mock_capture.assert_called_once()

    @override_settings(EXPOSE_ERROR_DETAILS=False)
    @patch('core.middleware.sentry_sdk.capture_exception')
    def test_details_hidden_when_disabled(self, mock_capture):
        with self.assertLogs('core.middleware', level='ERROR'):
            response = self.client.get('/api/errors/runtime')

        self.assertNotIn('error', response.json())


class NotFoundTests(TestCase):
    def test_unknown_api_path_is_json_404(self):
        response = Client().get('/api/nothing-here')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'success': False, 'message': 'Not found'})


class SecurityHeadersTests(TestCase):
    def test_headers_present(self):
        response = Client().get(reverse('core:csrf_token'))

        self.assertIn("default-src 'self'", response['Content-Security-Policy'])
        self.assertEqual(response['X-XSS-Protection'], '1; mode=block')
        self.assertEqual(response['X-Content-Type-Options'], 'nosniff')
        self.assertEqual(response['X-Frame-Options'], 'SAMEORIGIN')
        self.assertEqual(response['Referrer-Policy'], 'strict-origin-when-cross-origin')
        self.assertIn('Permissions-Policy', response)


class CsrfTests(TestCase):
    def setUp(self):
        self.client = Client(enforce_csrf_checks=True)
        self.login_url = reverse('accounts:login')
        self.body = '{"email": "x@example.com", "password": "nope"}'

    def test_post_without_token_is_rejected(self):
        response = self.client.post(self.login_url, self.body, content_type='application/json')

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json(), {'error': 'Invalid or missing CSRF token'})

    def test_post_with_token_passes(self):
        token = self.client.get(reverse('core:csrf_token')).json()['csrfToken']

        response = self.client.post(
            self.login_url,
            self.body,
            content_type='application/json',
            HTTP_X_CSRFTOKEN=token,
        )

        # Past the CSRF check; rejected on credentials instead
        self.assertEqual(response.status_code, 401)
