"""
Journey event log.

Each event is one INFO record on the `journeys.events` logger, with the event
fields attached as `extra` so structured handlers can pick them up.
"""
import logging
from enum import Enum
from typing import Optional

logger = logging.getLogger('journeys.events')


class JourneyEvent(str, Enum):
    START = 'JOURNEY_START'
    REFLECTION_SUBMIT = 'REFLECTION_SUBMIT'
    DAY_COMPLETE = 'DAY_COMPLETE'
    JOURNEY_COMPLETE = 'JOURNEY_COMPLETE'


def log_event(
    event: JourneyEvent,
    user_id: int,
    journey_id: str,
    day: Optional[int] = None,
    reflection_length: Optional[int] = None,
    **metadata,
) -> None:
    fields = {
        'event_type': event.value,
        'user_id': user_id,
        'journey_id': journey_id,
        'day_number': day,
        'reflection_length': reflection_length,
        'metadata': metadata,
    }
    suffix = f" day={day}" if day is not None else ''
    logger.info(f"{event.value} user={user_id} journey={journey_id}{suffix}", extra={'journey_event': fields})
