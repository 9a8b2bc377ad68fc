from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.listings.models import LISTING_MODELS, ListingStatus


class Command(BaseCommand):
    help = 'Clear lapsed featured/boosted flags and expire listings past their expiry date'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Only report what would change',
        )

    def handle(self, *args, **options):
        now = timezone.now()
        dry_run = options['dry_run']

        for kind, model in LISTING_MODELS.items():
            featured = model.objects.filter(is_featured=True, featured_until__lt=now)
            boosted = model.objects.filter(is_boosted=True, boosted_until__lt=now)
            expired = model.objects.filter(
                status=ListingStatus.ACTIVE,
                expires_at__isnull=False,
                expires_at__lt=now,
            )

            if dry_run:
                counts = (featured.count(), boosted.count(), expired.count())
            else:
                counts = (
                    featured.update(is_featured=False, featured_until=None, updated_at=now),
                    boosted.update(is_boosted=False, boosted_until=None, updated_at=now),
                    expired.update(status=ListingStatus.EXPIRED, updated_at=now),
                )

            prefix = '[dry run] ' if dry_run else ''
            self.stdout.write(self.style.SUCCESS(
                f'{prefix}{kind}: {counts[0]} unfeatured, {counts[1]} unboosted, {counts[2]} expired'
            ))
