from __future__ import annotations

from decimal import Decimal

from django.core.management.base import BaseCommand  # type: ignore
from django.db import transaction  # type: ignore

from apps.properties.models import Property, PropertyLink

# Lux and Standard are one house; the whole territory includes every property
PROPERTIES = [
    ("1", "Lux", Decimal("5500.00"), 4),
    ("2", "Standard", Decimal("3000.00"), 2),
    ("3", "Backyard", Decimal("4000.00"), 10),
    ("4", "Whole territory", Decimal("15000.00"), 20),
]

LINKS = [
    ("1", "2"),
    ("1", "4"),
    ("2", "4"),
    ("3", "4"),
]


class Command(BaseCommand):
    help = "Creates the house properties and their shared-calendar links"

    def add_arguments(self, parser):  # type: ignore
        parser.add_argument(
            "--update-rates",
            action="store_true",
            help="Overwrite rates and guest limits of existing properties",
        )

    def handle(self, *args, **options):  # type: ignore
        created = 0
        with transaction.atomic():
            for code, title, rate, max_guests in PROPERTIES:
                defaults = {"title": title, "nightly_rate": rate, "max_guests": max_guests}
                if options["update_rates"]:
                    _, was_created = Property.objects.update_or_create(code=code, defaults=defaults)
                else:
                    _, was_created = Property.objects.get_or_create(code=code, defaults=defaults)
                created += int(was_created)

            for from_code, to_code in LINKS:
                PropertyLink.objects.get_or_create(from_property_id=from_code, to_property_id=to_code)

        self.stdout.write(self.style.SUCCESS(
            f"Seeded {len(PROPERTIES)} properties ({created} new) and {len(LINKS)} links"
        ))
