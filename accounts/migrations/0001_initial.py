from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import pytz


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='UserProfile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('timezone', models.CharField(choices=[(tz, tz) for tz in pytz.common_timezones], default='UTC', help_text="User's timezone for accurate daily log dates", max_length=50)),
                ('push_daily_reminder', models.BooleanField(default=False, help_text="Send a push notification when today's log is still missing")),
                ('is_moderator', models.BooleanField(default=False, help_text='Can approve and hide forum posts')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='profile', to=settings.AUTH_USER_MODEL)),
            ],
        ),
    ]
