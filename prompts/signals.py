from datetime import date, timedelta

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver
from django.utils import timezone

from core.cache import delete_cached

from .models import Prompt

TODAY_CACHE_SECONDS = 60 * 60 * 24


def today_cache_key(day: date) -> str:
    return f'prompts:today:{day.isoformat()}'


@receiver(post_save, sender=Prompt)
@receiver(post_delete, sender=Prompt)
def invalidate_prompt_of_the_day(sender, instance: Prompt, **kwargs) -> None:
    """Adding or retiring a prompt reshuffles the rotation."""
    # User-local dates can be a day either side of the server's.
    today = timezone.localdate()
    for offset in (-1, 0, 1):
        delete_cached(today_cache_key(today + timedelta(days=offset)))
