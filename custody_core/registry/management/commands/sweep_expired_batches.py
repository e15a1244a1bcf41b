# custody_core/registry/management/commands/sweep_expired_batches.py
from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from custody_core.registry.models import Batch
from custody_core.registry.services import BatchService


class Command(BaseCommand):
    help = "Deactivate every active batch whose expiry date has passed. Safe to run repeatedly."

    def add_arguments(self, parser):
        parser.add_argument("--as-of", type=str, default=None, help="ISO datetime to sweep against (default: now).")
        parser.add_argument("--dry-run", action="store_true", help="Print the batches that would expire; do not write.")

    def handle(self, *args, **opts):
        as_of = timezone.now()
        if opts["as_of"]:
            as_of = parse_datetime(opts["as_of"])
            if as_of is None:
                raise CommandError(f"Invalid --as-of value: {opts['as_of']!r}")
            if timezone.is_naive(as_of):
                as_of = timezone.make_aware(as_of, timezone.get_current_timezone())

        if opts["dry_run"]:
            ids = list(
                Batch.objects.filter(is_active=True, expiry_date__lte=as_of)
                .order_by("expiry_date", "id")
                .values_list("id", flat=True)
            )
            for batch_id in ids:
                self.stdout.write(f"would expire {batch_id}")
            self.stdout.write(self.style.SUCCESS(f"Dry run: {len(ids)} batch(es) would be deactivated."))
            return

        deactivated = BatchService.sweep_expired_batches(now=as_of)
        for batch_id in deactivated:
            self.stdout.write(f"expired {batch_id}")
        self.stdout.write(self.style.SUCCESS(f"Sweep complete. Deactivated: {len(deactivated)}"))
