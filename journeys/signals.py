from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from core.cache import delete_cached

from .models import Journey

CATALOGUE_CACHE_KEY = 'journeys:catalogue'
CATALOGUE_CACHE_SECONDS = 60 * 60


@receiver(post_save, sender=Journey)
@receiver(post_delete, sender=Journey)
def invalidate_catalogue(sender, instance: Journey, **kwargs) -> None:
    """Any change to a journey invalidates the cached catalogue."""
    delete_cached(CATALOGUE_CACHE_KEY)
