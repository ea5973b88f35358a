from __future__ import annotations

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.catalog.models import Service
from apps.catalog.seed_data import SEED_SERVICES


class Command(BaseCommand):
    help = "Create or refresh the built-in consulting services."

    def add_arguments(self, parser):
        parser.add_argument(
            "--deactivate-missing",
            action="store_true",
            help="Deactivate services that are not part of the seed set.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        created_count = 0
        for raw in SEED_SERVICES:
            values = {key: value for key, value in raw.items() if key != "id"}
            values["price_amount"] = Decimal(values["price_amount"])
            values["is_active"] = True
            _, created = Service.objects.update_or_create(id=raw["id"], defaults=values)
            created_count += int(created)

        deactivated = 0
        if options["deactivate_missing"]:
            seed_ids = [raw["id"] for raw in SEED_SERVICES]
            deactivated = Service.objects.exclude(id__in=seed_ids).filter(is_active=True).update(is_active=False)

        self.stdout.write(
            self.style.SUCCESS(
                f"Seeded {len(SEED_SERVICES)} services ({created_count} new, {deactivated} deactivated)."
            )
        )
