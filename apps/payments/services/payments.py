"""
Payment Lifecycle Service
Initialization, gateway confirmation, refunds and the post-success dispatcher

pending → completed | failed | cancelled, completed → refunded.
Each transition locks the payment row; the dispatcher runs in the same
transaction as the status write and notifications go out after commit.
"""

import logging
import time
from datetime import timedelta
from decimal import Decimal
from typing import Dict, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from core.exceptions import Forbidden, Internal, InvalidInput, InvalidState, NotFound
from core.utils import generate_reference

from apps.listings.models import ListingKind, get_listing
from apps.notifications.services import notification_service
from apps.swaps.models import Swap

from ..constants import (
    CURRENCY_CODES,
    EVENT_PAYMENT_FAILED,
    EVENT_PAYMENT_SUCCESS,
    EVENT_REFUND_PROCESSED,
    REFERENCE_PREFIXES,
)
from ..models import Payment, PaymentEvent
from .gateway import PaymentGatewayService

logger = logging.getLogger(__name__)


def _config():
    return settings.SWAPRIDE


def _duration(value, default: int) -> int:
    """Promotion length in days, clamped to PROMOTION_MAX_DAYS"""
    try:
        days = int(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if days <= 0:
        return default
    return min(days, _config()['PROMOTION_MAX_DAYS'])


# Metadata key holding the promoted listing id, per payment type
PROMOTION_ID_KEYS = {
    Payment.Type.FEATURE_LISTING: 'listingId',
    Payment.Type.BOOST_AD: 'adId',
}


class PaymentService:
    """
    Payment state machine

    Args:
        notifier: Object exposing notify_payment_success / _failed / _refunded
                  (defaults to the shared NotificationService)
        gateway: PaymentGatewayService-like client
    """

    def __init__(self, notifier=None, gateway=None):
        self.notifier = notifier or notification_service
        self.gateway = gateway or PaymentGatewayService()

    # ==========================================
    # INITIALIZATION
    # ==========================================

    def initialize(
        self,
        user,
        amount: Optional[Decimal],
        currency: Optional[str] = None,
        payment_method: Optional[str] = None,
        description: str = '',
        metadata: Optional[Dict] = None,
    ) -> Payment:
        """
        Create a pending payment and open a checkout session for it

        Args:
            user: Paying user
            amount: Positive amount in major units
            currency: ISO code (defaults to DEFAULT_CURRENCY)
            payment_method: One of the PAYMENT_METHODS values (default card)
            description: Free text shown on the receipt
            metadata: Carries the 'type' discriminator and its fields

        Returns:
            The pending Payment with checkout_url set

        Raises:
            InvalidInput: amount missing or not positive, unsupported currency,
                          unknown metadata type
            NotFound / Forbidden: promoted listing missing or not the user's
            Internal: the gateway refused to open a checkout
        """
        if amount is None or amount <= 0:
            raise InvalidInput('Invalid amount')
        amount = Decimal(amount).quantize(Decimal('0.01'))

        currency = (currency or _config()['DEFAULT_CURRENCY']).upper()
        if currency not in CURRENCY_CODES:
            raise InvalidInput('Unsupported currency')

        payment_method = payment_method or 'card'
        if payment_method not in dict(Payment.METHOD_CHOICES):
            raise InvalidInput('Invalid payment method')

        metadata = dict(metadata or {})
        payment_type = metadata.get('type')
        if payment_type is not None and payment_type not in Payment.Type.values:
            raise InvalidInput('Invalid payment type')

        if payment_type in PROMOTION_ID_KEYS:
            self._owned_listing(
                user,
                metadata.get('listingType', ListingKind.VEHICLE),
                metadata.get(PROMOTION_ID_KEYS[payment_type])
            )

        prefix = REFERENCE_PREFIXES.get(payment_type, REFERENCE_PREFIXES[None])

        payment = Payment.objects.create(
            user=user,
            reference=generate_reference(prefix),
            amount=amount,
            currency=currency,
            payment_method=payment_method,
            description=description or '',
            metadata=metadata,
        )

        ok, data = self.gateway.initialize_charge(
            reference=payment.reference,
            amount=payment.amount,
            currency=payment.currency,
            email=user.email,
            metadata=metadata,
        )

        if not ok:
            payment.status = Payment.Status.FAILED
            payment.provider_message = data.get('error', '')
            payment.save(update_fields=['status', 'provider_message', 'updated_at'])
            raise Internal('Payment gateway unavailable')

        payment.checkout_url = data.get('checkout_url') or f"{settings.CLIENT_URL}/checkout/{payment.id}"
        payment.save(update_fields=['checkout_url', 'updated_at'])

        logger.info(f'Payment {payment.reference} initialized for user {user.pk}: {payment.display_amount}')
        return payment

    def initialize_subscription(self, user, plan: str, payment_method: Optional[str] = None) -> Payment:
        prices = _config()['SUBSCRIPTION_PRICES']
        if plan not in prices:
            raise InvalidInput('Invalid subscription plan')

        return self.initialize(
            user,
            prices[plan],
            payment_method=payment_method,
            description=f'{plan.title()} subscription',
            metadata={'type': Payment.Type.SUBSCRIPTION, 'plan': plan},
        )

    def _owned_listing(self, user, listing_type: str, listing_id):
        if listing_type not in ListingKind.values:
            raise InvalidInput('Invalid listing type')

        listing = get_listing(listing_type, listing_id)
        if listing is None:
            raise NotFound('Listing not found')
        if listing.seller_id != user.pk:
            raise Forbidden('You can only promote your own listings')
        return listing

    def initialize_feature_listing(self, user, listing_id, listing_type: str = ListingKind.VEHICLE,
                                   duration: Optional[int] = None) -> Payment:
        listing = self._owned_listing(user, listing_type, listing_id)
        duration = _duration(duration, _config()['PROMOTION_DEFAULT_DAYS'])

        return self.initialize(
            user,
            _config()['FEATURE_LISTING_PRICE'],
            currency=listing.currency,
            description='Featured listing',
            metadata={
                'type': Payment.Type.FEATURE_LISTING,
                'listingId': str(listing.pk),
                'listingType': listing_type,
                'duration': duration,
            },
        )

    def initialize_boost_ad(self, user, ad_id, listing_type: str = ListingKind.VEHICLE,
                            duration: Optional[int] = None) -> Payment:
        listing = self._owned_listing(user, listing_type, ad_id)
        duration = _duration(duration, _config()['PROMOTION_DEFAULT_DAYS'])

        return self.initialize(
            user,
            _config()['BOOST_AD_PRICE'],
            currency=listing.currency,
            description='Boosted ad',
            metadata={
                'type': Payment.Type.BOOST_AD,
                'adId': str(listing.pk),
                'listingType': listing_type,
                'duration': duration,
            },
        )

    def initialize_escrow(self, user, swap_id, amount: Optional[Decimal]) -> Payment:
        """Hold cash for an open swap; only a party to the swap may pay"""
        swap = Swap.objects.filter(pk=swap_id).first()
        if swap is None:
            raise NotFound('Swap not found')
        if not swap.is_party(user):
            raise Forbidden('Not authorized')
        if swap.is_terminal:
            raise InvalidState(f'Swap is already {swap.status}')

        return self.initialize(
            user,
            amount,
            currency=swap.currency,
            description='Escrow payment',
            metadata={'type': Payment.Type.ESCROW, 'swapId': str(swap.pk)},
        )

    # ==========================================
    # TRANSITIONS (caller holds the row lock)
    # ==========================================

    def _mark_completed(self, payment: Payment, transaction_id: str = '') -> bool:
        if payment.status != Payment.Status.PENDING:
            return False

        payment.status = Payment.Status.COMPLETED
        payment.transaction_id = transaction_id or f'TXN-{int(time.time() * 1000)}'
        payment.provider_status = 'success'
        payment.provider_message = 'Payment successful'
        payment.paid_at = timezone.now()
        payment.save(update_fields=[
            'status', 'transaction_id', 'provider_status', 'provider_message', 'paid_at', 'updated_at'
        ])

        self._dispatch(payment)
        return True

    def _mark_failed(self, payment: Payment, reason: str = '') -> bool:
        if payment.status != Payment.Status.PENDING:
            return False

        payment.status = Payment.Status.FAILED
        payment.provider_status = 'failed'
        payment.provider_message = reason or 'Payment failed'
        payment.save(update_fields=['status', 'provider_status', 'provider_message', 'updated_at'])
        return True

    def _mark_refunded(self, payment: Payment, reason: str = '', refunded_by=None) -> bool:
        if payment.status != Payment.Status.COMPLETED:
            return False

        metadata = dict(payment.metadata or {})
        metadata['refundReason'] = reason or ''
        metadata['refundedAt'] = timezone.now().isoformat()
        if refunded_by is not None:
            metadata['refundedBy'] = str(refunded_by.pk)

        payment.status = Payment.Status.REFUNDED
        payment.metadata = metadata
        payment.save(update_fields=['status', 'metadata', 'updated_at'])
        return True

    def _get_locked(self, **lookup) -> Optional[Payment]:
        return Payment.objects.select_for_update().select_related('user').filter(**lookup).first()

    # ==========================================
    # POST-SUCCESS DISPATCHER
    # ==========================================

    def _dispatch(self, payment: Payment):
        """Apply the domain effect of a completed payment, keyed on metadata type"""
        metadata = payment.metadata or {}
        payment_type = metadata.get('type')

        if payment_type == Payment.Type.SUBSCRIPTION:
            self._activate_subscription(payment.user, metadata.get('plan'))

        elif payment_type == Payment.Type.FEATURE_LISTING:
            self._promote(payment, 'featured', metadata.get('listingId'), metadata)

        elif payment_type == Payment.Type.BOOST_AD:
            self._promote(payment, 'boosted', metadata.get('adId'), metadata)

        elif payment_type == Payment.Type.ESCROW:
            logger.info(f'Escrow payment {payment.reference} held for swap {metadata.get("swapId")}')

    def _activate_subscription(self, user, plan: Optional[str]):
        if plan not in _config()['SUBSCRIPTION_PRICES']:
            logger.warning(f'Subscription payment for user {user.pk} has unknown plan {plan!r}')
            return

        days = _config()['SUBSCRIPTION_DURATIONS'].get(plan, _config()['SUBSCRIPTION_DEFAULT_DURATION'])
        now = timezone.now()

        user.subscription_plan = plan
        user.subscription_is_active = True
        user.subscription_start_date = now
        user.subscription_end_date = now + timedelta(days=days)
        user.save(update_fields=[
            'subscription_plan', 'subscription_is_active', 'subscription_start_date', 'subscription_end_date'
        ])

        logger.info(f'Subscription {plan} activated for user {user.pk} until {user.subscription_end_date}')

    def _promote(self, payment: Payment, flag: str, listing_id, metadata: Dict):
        listing = get_listing(metadata.get('listingType', ListingKind.VEHICLE), listing_id, for_update=True)
        if listing is None:
            logger.warning(f'Payment {payment.reference}: listing {listing_id} no longer exists, not {flag}')
            return

        if listing.seller_id != payment.user_id:
            logger.warning(f'Payment {payment.reference}: listing {listing_id} is not owned by the payer, not {flag}')
            return

        until = listing.promote(flag, _duration(metadata.get('duration'), _config()['PROMOTION_DEFAULT_DAYS']))
        logger.info(f'Listing {listing.pk} {flag} until {until}')

    # ==========================================
    # VERIFY
    # ==========================================

    def verify(self, reference: str, user) -> Payment:
        """
        Confirm a payment with the gateway

        Re-verifying a payment that is no longer pending returns it
        unchanged without running the dispatcher again.

        Raises:
            NotFound: no payment with that reference for this user
        """
        payment = Payment.objects.filter(reference=reference, user=user).first()
        if payment is None:
            raise NotFound('Payment not found')

        if payment.status != Payment.Status.PENDING:
            return payment

        ok, data = self.gateway.verify_charge(reference)
        if not ok:
            logger.warning(f'Payment {reference} could not be verified: {data.get("error")}')
            return payment

        status = data.get('status')
        if status not in ('success', 'failed'):
            return payment

        with transaction.atomic():
            payment = self._get_locked(pk=payment.pk)
            if status == 'success':
                changed = self._mark_completed(payment, data.get('transaction_id', ''))
            else:
                changed = self._mark_failed(payment, data.get('message', ''))

        if changed:
            self._notify(payment)
        return payment

    # ==========================================
    # WEBHOOK
    # ==========================================

    def handle_webhook(self, payload: Dict, raw_body: bytes = b'', signature: Optional[str] = None) -> str:
        """
        Apply a gateway callback

        Each delivery is recorded in PaymentEvent under its event id; a
        repeated id is skipped so at-least-once delivery never applies the
        same transition twice.

        Returns:
            Outcome label ('processed', 'duplicate', 'ignored',
            'unknown_payment', 'invalid_signature')
        """
        if not self.gateway.verify_webhook_signature(raw_body, signature):
            logger.warning('Payment webhook rejected: invalid signature')
            return 'invalid_signature'

        event = payload.get('event')
        data = payload.get('data') or {}
        reference = data.get('reference')

        if event not in (EVENT_PAYMENT_SUCCESS, EVENT_PAYMENT_FAILED, EVENT_REFUND_PROCESSED) or not reference:
            logger.warning(f'Unhandled payment webhook: {event}')
            return 'ignored'

        event_id = str(data.get('id') or data.get('eventId') or f'{event}:{reference}')

        with transaction.atomic():
            record, created = PaymentEvent.objects.get_or_create(
                event_id=event_id,
                defaults={'event': event, 'payload': payload}
            )
            if not created:
                logger.info(f'Duplicate payment webhook {event_id} skipped')
                return 'duplicate'

            payment = self._get_locked(reference=reference)
            if payment is None:
                logger.warning(f'Payment webhook {event_id} for unknown reference {reference}')
                record.outcome = 'unknown_payment'
                record.save(update_fields=['outcome'])
                return 'unknown_payment'

            if event == EVENT_PAYMENT_SUCCESS:
                changed = self._mark_completed(payment, data.get('transactionId', ''))
            elif event == EVENT_PAYMENT_FAILED:
                changed = self._mark_failed(payment, data.get('reason', ''))
            else:
                changed = self._mark_refunded(payment, data.get('reason', 'Refund processed by gateway'))

            record.payment = payment
            record.outcome = 'processed' if changed else 'ignored'
            record.save(update_fields=['payment', 'outcome'])

        if not changed:
            logger.info(f'Payment webhook {event} ignored for {reference} in status {payment.status}')
            return 'ignored'

        logger.info(f'Payment webhook {event} applied to {reference}')
        self._notify(payment)
        return 'processed'

    # ==========================================
    # CANCEL & REFUND
    # ==========================================

    def cancel(self, payment_id, user) -> Payment:
        with transaction.atomic():
            payment = self._get_locked(pk=payment_id, user=user)
            if payment is None:
                raise NotFound('Payment not found')

            if payment.status != Payment.Status.PENDING:
                raise InvalidState('Only pending payments can be cancelled')

            payment.status = Payment.Status.CANCELLED
            payment.save(update_fields=['status', 'updated_at'])

        logger.info(f'Payment {payment.reference} cancelled by user {user.pk}')
        return payment

    def refund(self, payment_id, user, reason: str = '', admin=None) -> Payment:
        """
        Mark a completed payment refunded

        Args:
            user: Owner requesting the refund (ignored when admin is given)
            admin: Staff member refunding any user's payment; recorded as refundedBy
        """
        lookup = {'pk': payment_id} if admin is not None else {'pk': payment_id, 'user': user}

        with transaction.atomic():
            payment = self._get_locked(**lookup)
            if payment is None:
                raise NotFound('Payment not found')

            if not self._mark_refunded(payment, reason, refunded_by=admin):
                raise InvalidState('Only completed payments can be refunded')

        logger.info(f'Payment {payment.reference} refunded ({reason or "no reason"})')
        self._notify(payment)
        return payment

    def cancel_subscription(self, user):
        if not user.subscription_is_active:
            raise InvalidState('No active subscription')

        user.subscription_is_active = False
        user.save(update_fields=['subscription_is_active'])
        logger.info(f'Subscription cancelled for user {user.pk}')
        return user

    # ==========================================
    # READS
    # ==========================================

    def get_for_user(self, payment_id, user) -> Payment:
        payment = Payment.objects.filter(pk=payment_id, user=user).first()
        if payment is None:
            raise NotFound('Payment not found')
        return payment

    def history(self, user, status: Optional[str] = None, payment_type: Optional[str] = None):
        queryset = Payment.objects.filter(user=user)
        if status:
            queryset = queryset.filter(status=status)
        if payment_type:
            queryset = queryset.filter(metadata__type=payment_type)
        return queryset

    # ==========================================
    # NOTIFICATIONS
    # ==========================================

    def _notify(self, payment: Payment):
        handler = {
            Payment.Status.COMPLETED: self.notifier.notify_payment_success,
            Payment.Status.FAILED: self.notifier.notify_payment_failed,
            Payment.Status.REFUNDED: self.notifier.notify_payment_refunded,
        }.get(payment.status)

        if handler is None:
            return

        try:
            handler(payment)
        except Exception as e:
            logger.error(f'Payment {payment.reference} notification failed: {str(e)}')


# Singleton instance
payment_service = PaymentService()
