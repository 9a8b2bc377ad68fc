"""
Swap Lifecycle Service
Proposal, response and completion of listing swaps

Each transition locks the swap row and runs its precondition check and
writes in one transaction; notifications go out after commit.
"""

import logging
from decimal import Decimal
from typing import Dict, Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Count, F, Q
from django.utils import timezone

from core.exceptions import Forbidden, InvalidInput, InvalidState, NotFound

from apps.listings.models import ListingKind, ListingStatus, get_listing, get_listing_model
from apps.notifications.services import notification_service

from .models import Swap

logger = logging.getLogger(__name__)

User = get_user_model()


class SwapService:
    """
    Swap state machine

    Args:
        notifier: Object exposing the notify_swap_* methods
                  (defaults to the shared NotificationService)
    """

    def __init__(self, notifier=None):
        self.notifier = notifier or notification_service

    # ==========================================
    # PROPOSE
    # ==========================================

    def propose(
        self,
        initiator,
        offered_item_id,
        requested_item_type: str,
        requested_item_id,
        message: str = '',
        additional_cash: Optional[Decimal] = None,
        currency: Optional[str] = None,
        offered_item_type: str = ListingKind.VEHICLE,
    ) -> Swap:
        """
        Create a pending swap and notify the owner of the requested item

        Raises:
            InvalidInput: offered item missing / not owned, unknown item type,
                          negative cash, or proposing to yourself
            NotFound: requested item doesn't exist
        """
        if offered_item_type not in ListingKind.values:
            raise InvalidInput('Invalid offered item type')
        if requested_item_type not in ListingKind.values:
            raise InvalidInput('Invalid requested item type')

        offered = get_listing(offered_item_type, offered_item_id)
        if offered is None or offered.seller_id != initiator.pk:
            raise InvalidInput(f'Invalid offered {offered_item_type}')

        requested = get_listing(requested_item_type, requested_item_id)
        if requested is None:
            raise NotFound(f'Requested {requested_item_type} not found')

        if requested.seller_id == initiator.pk:
            raise InvalidInput('Cannot propose swap with yourself')

        additional_cash = additional_cash if additional_cash is not None else Decimal('0')
        if additional_cash < 0:
            raise InvalidInput('Additional cash cannot be negative')

        swap = Swap.objects.create(
            initiator=initiator,
            receiver_id=requested.seller_id,
            offered_item_type=offered_item_type,
            offered_item_id=offered.pk,
            requested_item_type=requested_item_type,
            requested_item_id=requested.pk,
            message=message or '',
            additional_cash=additional_cash,
            currency=currency or 'USD',
        )

        logger.info(f'Swap {swap.id} proposed by user {initiator.pk} to user {swap.receiver_id}')

        self._notify('swap_proposal', swap)
        return swap

    # ==========================================
    # TRANSITIONS
    # ==========================================

    def _get_locked(self, swap_id) -> Swap:
        try:
            return Swap.objects.select_for_update().get(pk=swap_id)
        except Swap.DoesNotExist:
            raise NotFound('Swap not found')

    def _respond(self, swap_id, user, status: str, response_note: str) -> Swap:
        with transaction.atomic():
            swap = self._get_locked(swap_id)

            if swap.receiver_id != user.pk:
                raise Forbidden('Only receiver can perform this action')

            if swap.status != Swap.Status.PENDING:
                raise InvalidState('Swap is no longer pending')

            swap.status = status
            swap.response_note = response_note or ''
            swap.responded_at = timezone.now()
            swap.save(update_fields=['status', 'response_note', 'responded_at', 'updated_at'])

        logger.info(f'Swap {swap.id} {status}')
        return swap

    def accept(self, swap_id, user, response_note: str = '') -> Swap:
        swap = self._respond(swap_id, user, Swap.Status.ACCEPTED, response_note)
        self._notify('swap_accepted', swap)
        return swap

    def reject(self, swap_id, user, response_note: str = '') -> Swap:
        swap = self._respond(swap_id, user, Swap.Status.REJECTED, response_note)
        self._notify('swap_rejected', swap)
        return swap

    def cancel(self, swap_id, user) -> Swap:
        """Either party may cancel a pending or accepted swap"""
        with transaction.atomic():
            swap = self._get_locked(swap_id)

            if not swap.is_party(user):
                raise Forbidden('Not authorized')

            if swap.status == Swap.Status.COMPLETED:
                raise InvalidState('Cannot cancel completed swap')

            if swap.is_terminal:
                raise InvalidState(f'Swap is already {swap.status}')

            swap.status = Swap.Status.CANCELLED
            swap.cancelled_at = timezone.now()
            swap.save(update_fields=['status', 'cancelled_at', 'updated_at'])

        logger.info(f'Swap {swap.id} cancelled by user {user.pk}')

        self._notify('swap_cancelled', swap, user)
        return swap

    def complete(self, swap_id, user) -> Swap:
        """
        Complete an accepted swap

        Marks both listings swapped and bumps both users' swap counters in
        the same transaction as the status change.
        """
        with transaction.atomic():
            swap = self._get_locked(swap_id)

            if not swap.is_party(user):
                raise Forbidden('Not authorized')

            if swap.status != Swap.Status.ACCEPTED:
                raise InvalidState('Swap must be accepted before completion')

            now = timezone.now()
            swap.status = Swap.Status.COMPLETED
            swap.completed_at = now
            swap.save(update_fields=['status', 'completed_at', 'updated_at'])

            for kind, item_id in (
                (swap.offered_item_type, swap.offered_item_id),
                (swap.requested_item_type, swap.requested_item_id),
            ):
                # Listings deleted since the proposal are skipped
                get_listing_model(kind).objects.filter(pk=item_id).update(
                    status=ListingStatus.SWAPPED,
                    updated_at=now
                )

            User.objects.filter(pk__in=[swap.initiator_id, swap.receiver_id]).update(
                total_swaps=F('total_swaps') + 1
            )

        logger.info(f'Swap {swap.id} completed by user {user.pk}')

        self._notify('swap_completed', swap, user)
        return swap

    def _notify(self, event: str, *args):
        """Runs after commit; a failure here is logged, never raised"""
        try:
            getattr(self.notifier, f'notify_{event}')(*args)
        except Exception as e:
            logger.error(f'Swap notification {event} failed: {str(e)}')

    # ==========================================
    # READS
    # ==========================================

    def for_user(self, user, status: Optional[str] = None):
        """Swaps where the user is either party, newest first"""
        queryset = Swap.objects.filter(
            Q(initiator=user) | Q(receiver=user)
        ).select_related('initiator', 'receiver')

        if status:
            queryset = queryset.filter(status=status)
        return queryset

    def pending_for(self, user):
        """Proposals waiting on this user's answer"""
        return Swap.objects.filter(
            receiver=user,
            status=Swap.Status.PENDING
        ).select_related('initiator', 'receiver')

    def stats(self, user) -> Dict[str, int]:
        counts = self.for_user(user).aggregate(
            pending=Count('id', filter=Q(status=Swap.Status.PENDING)),
            active=Count('id', filter=Q(status=Swap.Status.ACCEPTED)),
            completed=Count('id', filter=Q(status=Swap.Status.COMPLETED)),
            rejected=Count('id', filter=Q(status=Swap.Status.REJECTED)),
            total=Count('id'),
        )
        return counts

    def get_for_party(self, swap_id, user) -> Swap:
        """
        Raises:
            NotFound: no such swap
            Forbidden: user is not a party to it
        """
        try:
            swap = Swap.objects.select_related('initiator', 'receiver').get(pk=swap_id)
        except Swap.DoesNotExist:
            raise NotFound('Swap not found')

        if not swap.is_party(user):
            raise Forbidden('Not authorized to view this swap')

        return swap


# Singleton instance
swap_service = SwapService()
