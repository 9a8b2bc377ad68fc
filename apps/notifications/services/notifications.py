"""
Notification Service
Records in-app notifications and fans out to real-time, email and SMS

Delivery is best-effort: every channel failure is logged and swallowed so
the swap / payment / moderation operation that triggered it never fails
because a notification could not be delivered.
"""

import logging
from typing import Dict, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from core.exceptions import NotFound

from ..models import Notification, NotificationType
from .channels import EmailService, RealtimeService, SMSService

logger = logging.getLogger(__name__)


DEFAULT_CHANNELS = {'in_app': True, 'email': False, 'sms': False}

# Only these types are important enough for an SMS
SMS_TYPES = frozenset({
    NotificationType.SWAP_ACCEPTED,
    NotificationType.PAYMENT_SUCCESS,
    NotificationType.LISTING_APPROVED,
    NotificationType.SECURITY_ALERT,
})

EMAIL_TEMPLATES = {
    NotificationType.SWAP_PROPOSAL_RECEIVED: 'notifications/emails/swap_proposal.html',
    NotificationType.SWAP_ACCEPTED: 'notifications/emails/swap_accepted.html',
    NotificationType.PAYMENT_SUCCESS: 'notifications/emails/payment_success.html',
    NotificationType.LISTING_APPROVED: 'notifications/emails/listing_approved.html',
    NotificationType.SUBSCRIPTION_EXPIRING: 'notifications/emails/subscription_expiring.html',
}


class NotificationService:
    """
    Main notification service - in-app inbox plus external channels

    Channels are injected so tests can substitute recording stubs:

        service = NotificationService(realtime=FakeRealtime())
    """

    def __init__(self, realtime=None, email=None, sms=None):
        self.realtime = realtime or RealtimeService()
        self.email = email or EmailService()
        self.sms = sms or SMSService()

    # ==========================================
    # DISPATCH
    # ==========================================

    def notify(self, user, payload: Dict, channels: Optional[Dict] = None) -> Optional[Notification]:
        """
        Deliver a notification to one user

        Args:
            user: Recipient (CustomUser)
            payload: {'type', 'title', 'message', 'data'?, 'action_url'?}
            channels: Overrides for {'in_app', 'email', 'sms'}

        Returns:
            The persisted Notification, or None if in-app was skipped or failed
        """
        channels = {**DEFAULT_CHANNELS, **(channels or {})}
        notification = None

        if channels['in_app']:
            notification = self._persist(user, payload)

        body = notification.to_dict() if notification else {
            'type': payload['type'],
            'title': payload['title'],
            'message': payload['message'],
            'data': payload.get('data', {}),
        }
        self._publish(user, body)

        if channels['email']:
            self._send_email(user, payload)

        if channels['sms']:
            self._send_sms(user, payload)

        return notification

    def _persist(self, user, payload: Dict) -> Optional[Notification]:
        try:
            # Own savepoint so a failed insert can't poison the caller's transaction
            with transaction.atomic():
                return Notification.objects.create(
                    user=user,
                    type=payload['type'],
                    title=payload['title'],
                    message=payload['message'],
                    data=payload.get('data') or {},
                    action_url=payload.get('action_url', ''),
                )
        except Exception as e:
            logger.error(f'In-app notification for user {user.pk} failed: {str(e)}')
            return None

    def _publish(self, user, body: Dict):
        try:
            self.realtime.publish(user.pk, 'notification', body)
        except Exception as e:
            logger.warning(f'Realtime notification for user {user.pk} failed: {str(e)}')

    def _send_email(self, user, payload: Dict):
        template_name = EMAIL_TEMPLATES.get(payload['type'])
        if not template_name or not user.email or not user.notification_email:
            return

        action_url = payload.get('action_url', '')
        context = {
            **(payload.get('data') or {}),
            'user_name': user.first_name or user.get_short_name(),
            'title': payload['title'],
            'message': payload['message'],
            'action_url': f"{settings.CLIENT_URL}{action_url}" if action_url else settings.CLIENT_URL,
        }

        try:
            self.email.send_template_email(
                to_email=user.email,
                subject=payload['title'],
                template_name=template_name,
                context=context
            )
        except Exception as e:
            logger.error(f'Email notification to {user.email} failed: {str(e)}')

    def _send_sms(self, user, payload: Dict):
        if payload['type'] not in SMS_TYPES or not user.phone or not user.notification_sms:
            return

        prefix = getattr(settings, 'NOTIFICATIONS', {}).get('SMS_PREFIX', 'SwapRide')

        try:
            self.sms.send_sms(user.phone, f"{prefix}: {payload['message']}")
        except Exception as e:
            logger.error(f'SMS notification to user {user.pk} failed: {str(e)}')

    # ==========================================
    # SWAP NOTIFICATIONS
    # ==========================================

    def notify_swap_proposal(self, swap):
        """Tell the receiver about a new proposal"""
        initiator_name = swap.initiator.get_full_name()
        item = swap.requested_item

        return self.notify(
            swap.receiver,
            {
                'type': NotificationType.SWAP_PROPOSAL_RECEIVED,
                'title': 'New Swap Proposal',
                'message': f'{initiator_name} wants to swap with your {item.title if item else "listing"}',
                'data': {
                    'swapId': str(swap.id),
                    'initiatorId': str(swap.initiator_id),
                    'initiatorName': initiator_name,
                    'itemTitle': item.title if item else '',
                },
                'action_url': f'/swaps/{swap.id}',
            },
            {'email': True}
        )

    def notify_swap_accepted(self, swap):
        receiver_name = swap.receiver.get_full_name()

        return self.notify(
            swap.initiator,
            {
                'type': NotificationType.SWAP_ACCEPTED,
                'title': 'Swap Accepted!',
                'message': f'{receiver_name} accepted your swap proposal',
                'data': {'swapId': str(swap.id), 'receiverName': receiver_name},
                'action_url': f'/swaps/{swap.id}',
            },
            {'email': True, 'sms': True}
        )

    def notify_swap_rejected(self, swap):
        return self.notify(
            swap.initiator,
            {
                'type': NotificationType.SWAP_REJECTED,
                'title': 'Swap Rejected',
                'message': f'{swap.receiver.get_full_name()} declined your swap proposal',
                'data': {'swapId': str(swap.id), 'responseNote': swap.response_note},
                'action_url': f'/swaps/{swap.id}',
            }
        )

    def notify_swap_cancelled(self, swap, cancelled_by):
        other = swap.other_party(cancelled_by)

        return self.notify(
            other,
            {
                'type': NotificationType.SWAP_CANCELLED,
                'title': 'Swap Cancelled',
                'message': f'{cancelled_by.get_full_name()} cancelled a swap',
                'data': {'swapId': str(swap.id)},
                'action_url': f'/swaps/{swap.id}',
            }
        )

    def notify_swap_completed(self, swap, completed_by):
        other = swap.other_party(completed_by)

        return self.notify(
            other,
            {
                'type': NotificationType.SWAP_COMPLETED,
                'title': 'Swap Completed',
                'message': f'{completed_by.get_full_name()} marked your swap as completed',
                'data': {'swapId': str(swap.id)},
                'action_url': f'/swaps/{swap.id}',
            }
        )

    # ==========================================
    # PAYMENT NOTIFICATIONS
    # ==========================================

    def notify_payment_success(self, payment):
        return self.notify(
            payment.user,
            {
                'type': NotificationType.PAYMENT_SUCCESS,
                'title': 'Payment Successful',
                'message': f'Your payment of {payment.display_amount} was successful',
                'data': {
                    'paymentId': str(payment.id),
                    'amount': str(payment.amount),
                    'currency': payment.currency,
                    'reference': payment.reference,
                    'type': payment.payment_type,
                },
                'action_url': f'/payments/{payment.id}',
            },
            {'email': True, 'sms': True}
        )

    def notify_payment_failed(self, payment):
        return self.notify(
            payment.user,
            {
                'type': NotificationType.PAYMENT_FAILED,
                'title': 'Payment Failed',
                'message': f'Your payment of {payment.display_amount} could not be completed',
                'data': {
                    'paymentId': str(payment.id),
                    'reference': payment.reference,
                    'reason': payment.provider_message,
                },
                'action_url': f'/payments/{payment.id}',
            }
        )

    def notify_payment_refunded(self, payment):
        return self.notify(
            payment.user,
            {
                'type': NotificationType.PAYMENT_REFUNDED,
                'title': 'Payment Refunded',
                'message': f'Your payment of {payment.display_amount} has been refunded',
                'data': {'paymentId': str(payment.id), 'reference': payment.reference},
                'action_url': f'/payments/{payment.id}',
            }
        )

    def notify_subscription_expiring(self, user, days_left: int):
        plan = user.get_subscription_plan_display()

        return self.notify(
            user,
            {
                'type': NotificationType.SUBSCRIPTION_EXPIRING,
                'title': 'Subscription Expiring Soon',
                'message': f'Your {plan} subscription expires in {days_left} days',
                'data': {'planName': plan, 'daysLeft': days_left},
                'action_url': '/subscription/renew',
            },
            {'email': True}
        )

    # ==========================================
    # MODERATION NOTIFICATIONS
    # ==========================================

    def notify_report_resolved(self, report):
        return self.notify(
            report.reporter,
            {
                'type': NotificationType.REPORT_RESOLVED,
                'title': 'Report Resolved',
                'message': f'Your report has been reviewed and {report.get_status_display().lower()}',
                'data': {
                    'reportId': str(report.id),
                    'itemType': report.item_type,
                    'action': report.action_taken,
                    'resolution': report.resolution,
                },
            }
        )

    def notify_listing_approved(self, listing):
        return self.notify(
            listing.seller,
            {
                'type': NotificationType.LISTING_APPROVED,
                'title': 'Listing Approved',
                'message': f'Your listing "{listing.title}" is now live!',
                'data': {'listingId': str(listing.id), 'title': listing.title, 'type': str(listing.kind)},
                'action_url': f'/{listing.kind}s/{listing.id}',
            },
            {'email': True, 'sms': True}
        )

    # ==========================================
    # INBOX
    # ==========================================

    def _get_for_user(self, notification_id, user) -> Notification:
        try:
            return Notification.objects.get(pk=notification_id, user=user)
        except Notification.DoesNotExist:
            raise NotFound('Notification not found')

    def mark_as_read(self, notification_id, user) -> Notification:
        notification = self._get_for_user(notification_id, user)
        notification.mark_as_read()
        return notification

    def mark_all_as_read(self, user) -> int:
        """Returns the number of notifications flipped to read"""
        return Notification.objects.filter(user=user, is_read=False).update(
            is_read=True,
            read_at=timezone.now()
        )

    def delete(self, notification_id, user):
        self._get_for_user(notification_id, user).delete()

    def clear_all(self, user) -> int:
        deleted, _ = Notification.objects.filter(user=user).delete()
        return deleted

    def unread_count(self, user) -> int:
        return Notification.objects.filter(user=user, is_read=False).count()


# Singleton instance
notification_service = NotificationService()
