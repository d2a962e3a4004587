"""
Push notifications through Firebase Cloud Messaging.

The Firebase app is initialised on first use from FIREBASE_CREDENTIALS,
which holds either the service account JSON itself or a path to it.
Sending to a user fans out to all of their registered device tokens; tokens
FCM reports as unregistered or invalid are deleted.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Optional

import firebase_admin
from django.conf import settings
from django.utils import timezone
from django_q.tasks import async_task
from firebase_admin import credentials, exceptions, messaging

from .models import DeviceToken

logger = logging.getLogger(__name__)

# Errors that mean the token itself is dead, not that the send failed.
INVALID_TOKEN_ERRORS = (
    messaging.UnregisteredError,
    messaging.SenderIdMismatchError,
    exceptions.InvalidArgumentError,
)


class NotificationsNotConfigured(Exception):
    """FIREBASE_CREDENTIALS is not set."""


@dataclass
class NotificationPayload:
    title: str
    body: str
    data: dict = field(default_factory=dict)
    image_url: Optional[str] = None

    def notification(self) -> messaging.Notification:
        return messaging.Notification(title=self.title, body=self.body, image=self.image_url)

    def string_data(self) -> dict:
        # FCM data payloads only carry strings
        return {str(k): str(v) for k, v in self.data.items()}


def get_firebase_app() -> firebase_admin.App:
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    raw = settings.FIREBASE_CREDENTIALS
    if not raw:
        raise NotificationsNotConfigured('FIREBASE_CREDENTIALS is not set')

    if raw.strip().startswith('{'):
        cred = credentials.Certificate(json.loads(raw))
    else:
        cred = credentials.Certificate(raw)
    logger.info("Initialising Firebase Admin SDK")
    return firebase_admin.initialize_app(cred)


def send_to_user(
    user_id: int,
    title: str,
    body: str,
    data: Optional[dict] = None,
    image_url: Optional[str] = None,
) -> int:
    """
    Push to every device the user registered.

    Returns:
        Number of devices the message was delivered to.
    """
    tokens = list(DeviceToken.objects.filter(user_id=user_id).values_list('token', flat=True))
    if not tokens:
        logger.info(f"User {user_id} has no registered devices; skipping push")
        return 0

    payload = NotificationPayload(title=title, body=body, data=data or {}, image_url=image_url)
    message = messaging.MulticastMessage(
        tokens=tokens,
        notification=payload.notification(),
        data=payload.string_data(),
    )
    response = messaging.send_each_for_multicast(message, app=get_firebase_app())

    delivered, invalid = [], []
    for token, result in zip(tokens, response.responses):
        if result.success:
            delivered.append(token)
        elif isinstance(result.exception, INVALID_TOKEN_ERRORS):
            invalid.append(token)
        else:
            logger.error(f"Push to user {user_id} failed: {result.exception}")

    if invalid:
        DeviceToken.objects.filter(token__in=invalid).delete()
        logger.info(f"Removed {len(invalid)} invalid FCM tokens for user {user_id}")
    if delivered:
        DeviceToken.objects.filter(token__in=delivered).update(last_used_at=timezone.now())

    return response.success_count


def queue_user_notification(
    user_id: int,
    title: str,
    body: str,
    data: Optional[dict] = None,
    image_url: Optional[str] = None,
) -> None:
    """Send to a user from the django-q cluster instead of the request thread."""
    async_task(
        'notifications.services.send_to_user',
        user_id,
        title,
        body,
        data,
        image_url,
    )


def send_to_topic(topic: str, payload: NotificationPayload) -> str:
    message = messaging.Message(
        notification=payload.notification(),
        data=payload.string_data(),
        topic=topic,
    )
    return messaging.send(message, app=get_firebase_app())


def subscribe_to_topic(tokens: list[str], topic: str) -> int:
    """Returns the number of tokens subscribed."""
    response = messaging.subscribe_to_topic(tokens, topic, app=get_firebase_app())
    for error in response.errors:
        logger.warning(f"Topic '{topic}' subscribe failed for token #{error.index}: {error.reason}")
    return response.success_count


def unsubscribe_from_topic(tokens: list[str], topic: str) -> int:
    response = messaging.unsubscribe_from_topic(tokens, topic, app=get_firebase_app())
    for error in response.errors:
        logger.warning(f"Topic '{topic}' unsubscribe failed for token #{error.index}: {error.reason}")
    return response.success_count
