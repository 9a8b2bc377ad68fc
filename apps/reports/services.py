"""
Moderation Service
Report submission and admin remediation
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from core.exceptions import InvalidInput, InvalidState, NotFound

from apps.listings.models import ListingKind, ListingStatus, get_listing
from apps.notifications.services import notification_service
from apps.swaps.models import Swap
from apps.users.models import Review

from .models import Report

logger = logging.getLogger(__name__)

User = get_user_model()

LISTING_KINDS = frozenset(ListingKind.values)


@dataclass(frozen=True)
class ReportTarget:
    """The thing a report points at: one of Report.ItemType plus an id"""

    kind: str
    id: uuid.UUID

    @classmethod
    def of(cls, item_type, item_id) -> 'ReportTarget':
        if item_type not in Report.ItemType.values:
            raise InvalidInput('Invalid item type')
        try:
            item_id = item_id if isinstance(item_id, uuid.UUID) else uuid.UUID(str(item_id))
        except (TypeError, ValueError):
            raise NotFound('Item not found')
        return cls(item_type, item_id)

    @property
    def is_listing(self):
        return self.kind in LISTING_KINDS

    def resolve(self, for_update=False):
        """Load the target, None when it no longer exists"""
        if self.is_listing:
            return get_listing(self.kind, self.id, for_update=for_update)

        model = {
            Report.ItemType.USER: User,
            Report.ItemType.SWAP: Swap,
            Report.ItemType.REVIEW: Review,
        }[self.kind]

        queryset = model.objects.select_for_update() if for_update else model.objects.all()
        return queryset.filter(pk=self.id).first()

    def responsible_user(self, item):
        """Account held accountable for the item (None for swaps)"""
        if self.kind == Report.ItemType.USER:
            return item
        if self.is_listing:
            return item.seller
        if self.kind == Report.ItemType.REVIEW:
            return item.reviewer
        return None


class ModerationService:
    """
    Report intake and resolution

    Args:
        notifier: Object exposing notify_report_resolved
                  (defaults to the shared NotificationService)
    """

    def __init__(self, notifier=None):
        self.notifier = notifier or notification_service

    # ==========================================
    # INTAKE
    # ==========================================

    def submit(self, reporter, item_type: str, item_id, reason: str, description: str = '') -> Report:
        """
        File a report

        Raises:
            InvalidInput: unknown item type, or an open report by this user
                          against the same item already exists
            NotFound: the target doesn't exist
        """
        target = ReportTarget.of(item_type, item_id)

        if target.resolve() is None:
            raise NotFound('Item not found')

        already_open = Report.objects.filter(
            reporter=reporter,
            item_type=target.kind,
            item_id=target.id,
        ).exclude(status__in=Report.CLOSED_STATUSES).exists()

        if already_open:
            raise InvalidInput('You have already reported this item')

        report = Report.objects.create(
            reporter=reporter,
            item_type=target.kind,
            item_id=target.id,
            reason=reason,
            description=description or '',
        )

        logger.info(f'Report {report.id} filed by user {reporter.pk} against {target.kind} {target.id}')
        return report

    # ==========================================
    # RESOLUTION
    # ==========================================

    def _get_open_locked(self, report_id) -> Report:
        try:
            report = Report.objects.select_for_update().get(pk=report_id)
        except Report.DoesNotExist:
            raise NotFound('Report not found')

        if report.is_closed:
            raise InvalidState(f'Report is already {report.status}')

        return report

    def resolve(self, report_id, admin, action: str, resolution: str = '') -> Report:
        """
        Apply a remediation action to the reported item and close the report

        Raises:
            InvalidInput: unknown action, or action doesn't apply to the item
            InvalidState: report already resolved or dismissed
            NotFound: report missing
        """
        if action not in Report.Action.values:
            raise InvalidInput('Invalid action')

        with transaction.atomic():
            report = self._get_open_locked(report_id)
            target = ReportTarget(report.item_type, report.item_id)

            if action != Report.Action.NO_ACTION:
                item = target.resolve(for_update=True)
                if item is None:
                    raise NotFound('Reported item no longer exists')
                self._apply_action(action, target, item, report)

            report.status = Report.Status.RESOLVED
            report.action_taken = action
            report.resolution = resolution or action
            report.resolved_by = admin
            report.resolved_at = timezone.now()
            report.save(update_fields=[
                'status', 'action_taken', 'resolution', 'resolved_by', 'resolved_at', 'updated_at'
            ])

        logger.info(f'Report {report.id} resolved by {admin.pk} with {action}')

        self._notify_reporter(report)
        return report

    def _apply_action(self, action, target, item, report):
        if action == Report.Action.REMOVE_ITEM:
            if target.is_listing:
                item.status = ListingStatus.INACTIVE
                item.save(update_fields=['status', 'updated_at'])
            elif target.kind == Report.ItemType.REVIEW:
                item.status = Review.Status.REJECTED
                item.save(update_fields=['status', 'updated_at'])
            else:
                raise InvalidInput(f'Cannot remove a {target.kind}')

        elif action == Report.Action.BAN_USER:
            user = target.responsible_user(item)
            if user is None:
                raise InvalidInput(f'No user to ban for a {target.kind} report')
            user.account_status = User.AccountStatus.BANNED
            user.is_active = False
            user.ban_reason = f'Banned due to report: {report.reason}'
            user.save(update_fields=['account_status', 'is_active', 'ban_reason'])
            logger.warning(f'User {user.pk} banned via report {report.id}')

        elif action == Report.Action.SUSPEND_ITEM:
            if target.is_listing:
                item.status = ListingStatus.PENDING
                item.save(update_fields=['status', 'updated_at'])
            elif target.kind == Report.ItemType.USER:
                item.account_status = User.AccountStatus.SUSPENDED
                item.save(update_fields=['account_status'])
            else:
                raise InvalidInput(f'Cannot suspend a {target.kind}')

    def dismiss(self, report_id, admin, resolution: str = '') -> Report:
        with transaction.atomic():
            report = self._get_open_locked(report_id)

            report.status = Report.Status.DISMISSED
            report.action_taken = Report.Action.NO_ACTION
            report.resolution = resolution or 'Dismissed'
            report.resolved_by = admin
            report.resolved_at = timezone.now()
            report.save(update_fields=[
                'status', 'action_taken', 'resolution', 'resolved_by', 'resolved_at', 'updated_at'
            ])

        logger.info(f'Report {report.id} dismissed by {admin.pk}')

        self._notify_reporter(report)
        return report

    def _notify_reporter(self, report):
        try:
            self.notifier.notify_report_resolved(report)
        except Exception as e:
            logger.error(f'Report {report.id} resolution notification failed: {str(e)}')

    def update_status(self, report_id, status: Optional[str] = None, resolution: Optional[str] = None) -> Report:
        """Move an open report between pending and reviewed, or edit its notes"""
        if status and status not in (Report.Status.PENDING, Report.Status.REVIEWED):
            raise InvalidInput('Invalid status')

        with transaction.atomic():
            report = self._get_open_locked(report_id)

            if status:
                report.status = status
            if resolution is not None:
                report.resolution = resolution
            report.save(update_fields=['status', 'resolution', 'updated_at'])

        return report

    # ==========================================
    # READS
    # ==========================================

    def get(self, report_id) -> Report:
        try:
            return Report.objects.select_related('reporter', 'resolved_by').get(pk=report_id)
        except Report.DoesNotExist:
            raise NotFound('Report not found')

    def delete(self, report_id):
        deleted, _ = Report.objects.filter(pk=report_id).delete()
        if not deleted:
            raise NotFound('Report not found')


# Singleton instance
moderation_service = ModerationService()
