"""
Tests for the accounts app.

Covers:
- Registration, login and logout
- Profile creation via signals
- Profile updates
- Password reset by email
- Partner invitations
- Data export (GDPR compliance)
- Account deletion (GDPR compliance)
- Rate limiting on the auth endpoints
"""
import json
import re
from datetime import date

from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase, Client, override_settings
from django.urls import reverse

from checkins.models import DailyLog
from core.ratelimit import reset_limiter
from .models import PartnerInvite, UserProfile
from .utils import get_user_today

User = get_user_model()

PASSWORD = 'Violet-Harbor-42'


class UserProfileSignalTests(TestCase):
    """Test that UserProfile is automatically created when User is created."""

    def test_profile_created_on_user_creation(self):
        user = User.objects.create_user(
            username='testuser',
            email='test@example.com',
        )

        self.assertTrue(hasattr(user, 'profile'))
        self.assertIsInstance(user.profile, UserProfile)
        self.assertEqual(user.profile.timezone, 'UTC')
        self.assertFalse(user.profile.is_moderator)


class GetUserTodayTests(TestCase):
    def test_uses_profile_timezone(self):
        user = User.objects.create_user(username='tz@example.com', email='tz@example.com')
        user.profile.timezone = 'Pacific/Kiritimati'
        user.profile.save()

        today = get_user_today(user)

        self.assertIsInstance(today, date)


class AuthApiTestCase(TestCase):
    def setUp(self):
        self.client = Client()

    def post_json(self, url, data):
        return self.client.post(url, json.dumps(data), content_type='application/json')

    def register(self, **overrides):
        data = {
            'email': 'Jamie@Example.com',
            'password': PASSWORD,
            'firstName': 'Jamie',
            'lastName': 'Rivera',
        }
        data.update(overrides)
        return self.post_json(reverse('accounts:register'), data)


class RegisterTests(AuthApiTestCase):
    def test_register_creates_user_and_session(self):
        response = self.register(timezone='Europe/Berlin')

        self.assertEqual(response.status_code, 201)
        user_data = response.json()['data']['user']
        self.assertEqual(user_data['email'], 'jamie@example.com')
        self.assertEqual(user_data['profile']['timezone'], 'Europe/Berlin')

        # Session is active
        self.assertEqual(self.client.get(reverse('user:profile')).status_code, 200)

    def test_duplicate_email_rejected(self):
        self.register()
        response = self.register(email='jamie@example.com')

        self.assertEqual(response.status_code, 400)
        self.assertIn('email', response.json()['errors'])
        self.assertEqual(User.objects.count(), 1)

    def test_weak_password_rejected(self):
        response = self.register(password='123')

        self.assertEqual(response.status_code, 400)
        self.assertIn('password', response.json()['errors'])

    def test_unknown_timezone_rejected(self):
        response = self.register(timezone='Mars/Olympus')
        self.assertEqual(response.status_code, 400)

    def test_invalid_json_returns_400(self):
        response = self.client.post(reverse('accounts:register'), '{not json', content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Invalid JSON')

    def test_get_not_allowed(self):
        self.assertEqual(self.client.get(reverse('accounts:register')).status_code, 405)


class LoginTests(AuthApiTestCase):
    def setUp(self):
        super().setUp()
        User.objects.create_user(
            username='jamie@example.com',
            email='jamie@example.com',
            password=PASSWORD,
            first_name='Jamie',
        )

    def test_login_is_case_insensitive_on_email(self):
        response = self.post_json(reverse('accounts:login'), {'email': 'JAMIE@example.com', 'password': PASSWORD})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['user']['firstName'], 'Jamie')

    def test_wrong_password_401(self):
        response = self.post_json(reverse('accounts:login'), {'email': 'jamie@example.com', 'password': 'nope'})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {'success': False, 'message': 'Invalid email or password'})

    def test_logout_ends_session(self):
        self.post_json(reverse('accounts:login'), {'email': 'jamie@example.com', 'password': PASSWORD})
        self.client.post(reverse('accounts:logout'))

        self.assertEqual(self.client.get(reverse('user:profile')).status_code, 401)


@override_settings(RATELIMIT_ENABLED=True)
class AuthRateLimitTests(AuthApiTestCase):
    def setUp(self):
        super().setUp()
        reset_limiter()

    def tearDown(self):
        reset_limiter()

    def test_login_limited_after_ten_attempts(self):
        for _ in range(10):
            response = self.post_json(reverse('accounts:login'), {'email': 'x@example.com', 'password': 'nope'})
            self.assertEqual(response.status_code, 401)

        response = self.post_json(reverse('accounts:login'), {'email': 'x@example.com', 'password': 'nope'})

        self.assertEqual(response.status_code, 429)
        self.assertEqual(
            response.json()['message'],
            'Too many authentication attempts from this IP, please try again later.',
        )
        self.assertIn('Retry-After', response)

    def test_password_reset_limited_after_three_requests(self):
        for _ in range(3):
            response = self.post_json(reverse('accounts:password_reset'), {'email': 'x@example.com'})
            self.assertEqual(response.status_code, 200)

        response = self.post_json(reverse('accounts:password_reset'), {'email': 'x@example.com'})
        self.assertEqual(response.status_code, 429)


class PasswordResetTests(AuthApiTestCase):
    def setUp(self):
        super().setUp()
        self.user = User.objects.create_user(
            username='jamie@example.com',
            email='jamie@example.com',
            password=PASSWORD,
        )

    def test_unknown_email_gets_same_answer(self):
        response = self.post_json(reverse('accounts:password_reset'), {'email': 'nobody@example.com'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(mail.outbox), 0)

    def test_reset_flow(self):
        response = self.post_json(reverse('accounts:password_reset'), {'email': 'jamie@example.com'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(mail.outbox), 1)

        match = re.search(r'uid=([\w-]+)&token=([\w-]+)', mail.outbox[0].body)
        self.assertIsNotNone(match)
        uid, token = match.groups()

        response = self.post_json(reverse('accounts:password_reset_confirm'), {
            'uid': uid,
            'token': token,
            'password': 'Amber-Lantern-77',
        })

        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('Amber-Lantern-77'))

    def test_bad_token_rejected(self):
        response = self.post_json(reverse('accounts:password_reset_confirm'), {
            'uid': 'MQ',
            'token': 'bad-token',
            'password': 'Amber-Lantern-77',
        })

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Invalid or expired reset link')


class ProfileTests(AuthApiTestCase):
    def setUp(self):
        super().setUp()
        self.user = User.objects.create_user(
            username='jamie@example.com',
            email='jamie@example.com',
            password=PASSWORD,
            first_name='Jamie',
        )
        self.client.login(username='jamie@example.com', password=PASSWORD)

    def patch_json(self, data):
        return self.client.patch(reverse('user:profile'), json.dumps(data), content_type='application/json')

    def test_get_profile(self):
        data = self.client.get(reverse('user:profile')).json()['data']
        self.assertEqual(data['email'], 'jamie@example.com')
        self.assertEqual(data['profile']['timezone'], 'UTC')

    def test_partial_update(self):
        response = self.patch_json({'lastName': 'Rivera', 'timezone': 'Asia/Tokyo', 'pushDailyReminder': True})

        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertEqual(self.user.first_name, 'Jamie')
        self.assertEqual(self.user.last_name, 'Rivera')
        self.assertEqual(self.user.profile.timezone, 'Asia/Tokyo')
        self.assertTrue(self.user.profile.push_daily_reminder)

    def test_invalid_timezone_rejected(self):
        response = self.patch_json({'timezone': 'Nowhere/Special'})
        self.assertEqual(response.status_code, 400)

    def test_requires_login(self):
        self.client.logout()
        response = self.client.get(reverse('user:profile'))
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()['success'])


class PartnerInviteTests(AuthApiTestCase):
    def setUp(self):
        super().setUp()
        self.user = User.objects.create_user(
            username='jamie@example.com',
            email='jamie@example.com',
            password=PASSWORD,
            first_name='Jamie',
            last_name='Rivera',
        )
        self.client.login(username='jamie@example.com', password=PASSWORD)

    def test_invite_is_emailed_with_code(self):
        response = self.post_json(reverse('user:send_invite'), {
            'recipient': 'Alex@Example.com',
            'message': "Let's do this together",
        })

        self.assertEqual(response.status_code, 201)
        code = response.json()['data']['inviteCode']
        invite = PartnerInvite.objects.get(code=code)
        self.assertEqual(invite.recipient, 'alex@example.com')
        self.assertEqual(invite.status, PartnerInvite.Status.PENDING)

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['alex@example.com'])
        self.assertEqual(mail.outbox[0].subject, 'Jamie Rivera invited you to Sparq Connection')
        self.assertIn(f'/join?code={code}', mail.outbox[0].body)
        self.assertIn("Let's do this together", mail.outbox[0].body)

    def test_sms_rejected(self):
        response = self.post_json(reverse('user:send_invite'), {'method': 'sms', 'recipient': '+15555550100'})

        self.assertEqual(response.status_code, 400)
        self.assertIn('method', response.json()['errors'])
        self.assertFalse(PartnerInvite.objects.exists())

    def test_cannot_invite_self(self):
        response = self.post_json(reverse('user:send_invite'), {'recipient': 'JAMIE@example.com'})
        self.assertEqual(response.status_code, 400)

    def test_sent_invites_listed(self):
        PartnerInvite.objects.create(sender=self.user, recipient='alex@example.com')

        data = self.client.get(reverse('user:sent_invites')).json()['data']

        self.assertEqual([i['recipient'] for i in data], ['alex@example.com'])

    def test_registering_with_code_accepts_invite(self):
        invite = PartnerInvite.objects.create(sender=self.user, recipient='alex@example.com')
        self.client.logout()

        response = self.register(email='alex@example.com', inviteCode=invite.code.lower())

        self.assertEqual(response.status_code, 201)
        invite.refresh_from_db()
        self.assertEqual(invite.status, PartnerInvite.Status.ACCEPTED)
        self.assertEqual(invite.accepted_by.email, 'alex@example.com')
        self.assertIsNotNone(invite.accepted_at)

    def test_used_code_rejected(self):
        invite = PartnerInvite.objects.create(
            sender=self.user, recipient='alex@example.com', status=PartnerInvite.Status.ACCEPTED,
        )
        self.client.logout()

        response = self.register(email='sam@example.com', inviteCode=invite.code)

        self.assertEqual(response.status_code, 400)
        self.assertIn('inviteCode', response.json()['errors'])

    def test_requires_login(self):
        self.client.logout()
        response = self.post_json(reverse('user:send_invite'), {'recipient': 'alex@example.com'})
        self.assertEqual(response.status_code, 401)


class DataExportTests(AuthApiTestCase):
    def setUp(self):
        super().setUp()
        self.user = User.objects.create_user(username='jamie@example.com', email='jamie@example.com', password=PASSWORD)
        self.client.login(username='jamie@example.com', password=PASSWORD)

    def test_export_is_attachment_with_all_sections(self):
        DailyLog.objects.create(user=self.user, date=get_user_today(self.user), action='Walk', mood=4)

        response = self.client.get(reverse('user:export_data'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response['Content-Disposition'],
            f'attachment; filename="user_data_{self.user.id}.json"',
        )
        data = json.loads(response.content)
        self.assertEqual(
            set(data),
            {'user', 'journeys', 'dailyLogs', 'promptResponses', 'forumPosts', 'gamification', 'partnerInvites'},
        )
        self.assertEqual(data['dailyLogs'][0]['action'], 'Walk')
        self.assertEqual(data['gamification']['moodEntries'], 1)
        self.assertIn('dateJoined', data['user'])


class AccountDeletionTests(AuthApiTestCase):
    def setUp(self):
        super().setUp()
        self.user = User.objects.create_user(username='jamie@example.com', email='jamie@example.com', password=PASSWORD)
        self.client.login(username='jamie@example.com', password=PASSWORD)

    def test_requires_confirmation(self):
        response = self.post_json(reverse('user:delete_account'), {})

        self.assertEqual(response.status_code, 400)
        self.assertTrue(User.objects.filter(pk=self.user.pk).exists())

    def test_delete_removes_user_and_data(self):
        DailyLog.objects.create(user=self.user, date=get_user_today(self.user), action='Walk', mood=4)

        response = self.post_json(reverse('user:delete_account'), {'confirm': 'DELETE'})

        self.assertEqual(response.status_code, 200)
        self.assertFalse(User.objects.filter(pk=self.user.pk).exists())
        self.assertFalse(DailyLog.objects.exists())
        self.assertFalse(UserProfile.objects.exists())
