"""
Import journey definitions from a JSON design file.

A design lists journeys by their public id; importing creates missing
journeys and updates existing ones in place, so progress records keep
pointing at the same rows.
"""
from __future__ import annotations

import logging

import jsonschema
from django.db import transaction

from .models import RESERVED_JOURNEY_IDS, Journey

logger = logging.getLogger(__name__)


JOURNEY_DESIGN_SCHEMA = {
    "type": "object",
    "properties": {
        "journeys": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {
                        "type": "string",
                        "pattern": "^[-a-zA-Z0-9_]+$",
                        "not": {"enum": list(RESERVED_JOURNEY_IDS)},
                    },
                    "title": {"type": "string", "minLength": 1},
                    "description": {"type": "string"},
                    "duration": {"type": "integer", "minimum": 1},
                    "category": {"type": "string"},
                    "is_active": {"type": "boolean"},
                },
                "required": ["id", "title", "duration"]
            }
        }
    },
    "required": ["journeys"]
}


def validate_journey_design(data: dict) -> list[str]:
    """
    Validate a journey design dict using JSON Schema.

    Returns:
        A list of error messages. Empty list if valid.
    """
    try:
        jsonschema.validate(instance=data, schema=JOURNEY_DESIGN_SCHEMA)
        return []
    except jsonschema.ValidationError as e:
        path = '/'.join(str(p) for p in e.path)
        return [f"{e.message} (at path: {path})"]


@transaction.atomic
def import_journeys_from_dict(data: dict, validate: bool = True) -> tuple[list[Journey], list[Journey]]:
    """
    Create or update the journeys described by `data`.

    Returns:
        (created, updated) lists of Journey instances.

    Raises:
        ValueError: If validate=True and the dict structure is invalid.
    """
    if validate:
        errors = validate_journey_design(data)
        if errors:
            raise ValueError(f"Invalid journey design: {'; '.join(errors)}")

    created, updated = [], []
    for journey_data in data["journeys"]:
        journey, was_created = Journey.objects.update_or_create(
            slug=journey_data["id"],
            defaults={
                "title": journey_data["title"],
                "description": journey_data.get("description", ""),
                "duration_days": journey_data["duration"],
                "category": journey_data.get("category", ""),
                "is_active": journey_data.get("is_active", True),
            },
        )
        (created if was_created else updated).append(journey)
        logger.info(f"{'Created' if was_created else 'Updated'} journey '{journey.slug}'")

    return created, updated
