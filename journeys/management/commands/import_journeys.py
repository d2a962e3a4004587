"""
Import journeys from a JSON design file.

Usage:
    python manage.py import_journeys <file.json> [--validate-only]

The file looks like:
    {"journeys": [{"id": "communication-basics", "title": "Communication Basics",
                   "description": "...", "duration": 7, "category": "communication"}]}
"""
import json
from django.core.management.base import BaseCommand, CommandError

from journeys.design import import_journeys_from_dict, validate_journey_design


class Command(BaseCommand):
    help = 'Create or update journeys from a JSON design file'

    def add_arguments(self, parser):
        parser.add_argument(
            'json_file',
            type=str,
            help='Path to the JSON file containing the journey design'
        )
        parser.add_argument(
            '--validate-only',
            action='store_true',
            help='Only validate the JSON, do not create/update anything'
        )

    def handle(self, *args, **options):
        json_file = options['json_file']

        try:
            with open(json_file, 'r') as f:
                data = json.load(f)
        except FileNotFoundError:
            raise CommandError(f"File not found: {json_file}")
        except json.JSONDecodeError as e:
            raise CommandError(f"Invalid JSON in {json_file}: {e}")

        errors = validate_journey_design(data)
        if errors:
            self.stdout.write(self.style.ERROR("Validation errors:"))
            for error in errors:
                self.stdout.write(self.style.ERROR(f"  - {error}"))
            raise CommandError("JSON validation failed")

        if options.get('validate_only'):
            self.stdout.write(self.style.SUCCESS("JSON is valid!"))
            for journey in data["journeys"]:
                self.stdout.write(f"  - {journey['id']}: {journey['title']} ({journey['duration']} days)")
            return

        created, updated = import_journeys_from_dict(data, validate=False)

        for journey in created:
            self.stdout.write(f"  Created: {journey.slug}")
        for journey in updated:
            self.stdout.write(f"  Updated: {journey.slug}")
        self.stdout.write(self.style.SUCCESS(
            f"Imported {len(created) + len(updated)} journeys ({len(created)} new, {len(updated)} updated)"
        ))
