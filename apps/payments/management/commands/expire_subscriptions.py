from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.notifications.services import notification_service

User = get_user_model()


class Command(BaseCommand):
    help = 'Deactivate lapsed subscriptions and warn users whose plan ends soon'

    def add_arguments(self, parser):
        parser.add_argument(
            '--warn-days',
            type=int,
            default=3,
            help='Warn subscribers whose plan ends within this many days (default: 3)',
        )

    def handle(self, *args, **options):
        now = timezone.now()
        warn_until = now + timedelta(days=options['warn_days'])

        expired = User.objects.filter(
            subscription_is_active=True,
            subscription_end_date__lt=now,
        ).update(subscription_is_active=False)

        expiring = User.objects.filter(
            subscription_is_active=True,
            subscription_end_date__gte=now,
            subscription_end_date__lte=warn_until,
        )

        warned = 0
        for user in expiring:
            days_left = max((user.subscription_end_date - now).days, 1)
            notification_service.notify_subscription_expiring(user, days_left)
            warned += 1

        self.stdout.write(self.style.SUCCESS(f'{expired} subscription(s) expired, {warned} expiry warning(s) sent'))
