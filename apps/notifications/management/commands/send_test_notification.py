from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from apps.notifications.models import NotificationType
from apps.notifications.services import notification_service


class Command(BaseCommand):
    help = "Send a test notification to a user through the configured channels."

    def add_arguments(self, parser):
        parser.add_argument("email", help="Email address of the recipient account")
        parser.add_argument(
            "--type",
            default=NotificationType.SYSTEM,
            choices=NotificationType.values,
            help="Notification type (selects the email template where one exists)",
        )
        parser.add_argument("--title", default="SwapRide test notification")
        parser.add_argument(
            "--message",
            default="This is a test notification sent from the SwapRide backend.",
        )
        parser.add_argument("--email", dest="send_email", action="store_true", help="Also send by email")
        parser.add_argument("--sms", dest="send_sms", action="store_true", help="Also send by SMS")

    def handle(self, *args, **options):
        User = get_user_model()

        try:
            user = User.objects.get(email__iexact=options["email"])
        except User.DoesNotExist:
            raise CommandError(f"No user with email {options['email']}")

        notification = notification_service.notify(
            user,
            {
                "type": options["type"],
                "title": options["title"],
                "message": options["message"],
            },
            channels={"email": options["send_email"], "sms": options["send_sms"]},
        )

        if notification is None:
            raise CommandError("In-app notification could not be stored")

        self.stdout.write(self.style.SUCCESS(f"Notification {notification.id} sent to {user.email}"))
