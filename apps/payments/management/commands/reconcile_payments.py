from __future__ import annotations

from django.core.management.base import BaseCommand

from apps.payments.application.use_cases.reconcile_payments import ReconcilePaymentsCommand, ReconcilePaymentsUseCase


class Command(BaseCommand):
    help = "Link or abandon payment attempts whose gateway order was never recorded locally."

    def add_arguments(self, parser):
        parser.add_argument("--grace-minutes", type=int, default=None)
        parser.add_argument("--limit", type=int, default=200)

    def handle(self, *args, **options):
        result = ReconcilePaymentsUseCase.execute(
            ReconcilePaymentsCommand(grace_minutes=options["grace_minutes"], limit=options["limit"])
        )
        self.stdout.write(
            self.style.SUCCESS(f"linked={result.linked} abandoned={result.abandoned} errors={result.errors}")
        )
