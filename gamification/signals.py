from django.db.models.signals import post_save
from django.dispatch import receiver

from checkins.models import DailyLog
from prompts.models import PromptResponse

from . import services


@receiver(post_save, sender=PromptResponse)
def award_prompt_response(sender, instance: PromptResponse, created: bool, **kwargs) -> None:
    if created:
        services.record_prompt_response(instance)


@receiver(post_save, sender=DailyLog)
def award_daily_log(sender, instance: DailyLog, created: bool, **kwargs) -> None:
    """Editing an existing log earns nothing."""
    if created:
        services.record_daily_log(instance)
