"""
Push a daily log reminder to opted-in users who have not logged today.

"Today" is each user's local date. Pushes are queued on the django-q
cluster.

Usage:
    python manage.py send_daily_reminders [--dry-run]
"""
from typing import Any
from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model

from accounts.utils import get_user_today
from checkins.models import DailyLog
from notifications.services import queue_user_notification

User = get_user_model()


class Command(BaseCommand):
    help = 'Send daily log push reminders to opted-in users'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show who would be reminded without sending anything',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        dry_run = options.get('dry_run', False)
        sent_count = 0

        users = User.objects.filter(
            is_active=True,
            profile__push_daily_reminder=True,
            device_tokens__isnull=False,
        ).distinct().select_related('profile')

        for user in users:
            today = get_user_today(user)
            if DailyLog.objects.filter(user=user, date=today).exists():
                continue

            if dry_run:
                self.stdout.write(f"Would remind {user.email} ({today})")
            else:
                queue_user_notification(
                    user.id,
                    'Daily check-in',
                    "You haven't logged today yet. Take a minute for your relationship.",
                    {'type': 'daily_reminder', 'date': today.isoformat()},
                )
            sent_count += 1

        verb = 'Would send' if dry_run else 'Queued'
        self.stdout.write(
            self.style.SUCCESS(f'{verb} {sent_count} daily reminders')
        )
