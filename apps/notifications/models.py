"""
Notifications App Models
In-app notification records shown in the user's inbox
"""

from django.conf import settings
from django.db import models
from django.utils import timezone
import uuid


class NotificationType(models.TextChoices):
    # Swaps
    SWAP_PROPOSAL_RECEIVED = 'swap_proposal_received', 'Swap Proposal Received'
    SWAP_ACCEPTED = 'swap_accepted', 'Swap Accepted'
    SWAP_REJECTED = 'swap_rejected', 'Swap Rejected'
    SWAP_CANCELLED = 'swap_cancelled', 'Swap Cancelled'
    SWAP_COMPLETED = 'swap_completed', 'Swap Completed'

    # Listings & reviews
    LISTING_APPROVED = 'listing_approved', 'Listing Approved'
    LISTING_EXPIRED = 'listing_expired', 'Listing Expired'
    NEW_REVIEW = 'new_review', 'New Review'

    # Payments
    PAYMENT_SUCCESS = 'payment_success', 'Payment Successful'
    PAYMENT_FAILED = 'payment_failed', 'Payment Failed'
    PAYMENT_REFUNDED = 'payment_refunded', 'Payment Refunded'
    SUBSCRIPTION_ACTIVE = 'subscription_active', 'Subscription Active'
    SUBSCRIPTION_EXPIRING = 'subscription_expiring', 'Subscription Expiring'
    SUBSCRIPTION_EXPIRED = 'subscription_expired', 'Subscription Expired'

    # Account & moderation
    REPORT_RESOLVED = 'report_resolved', 'Report Resolved'
    ACCOUNT_SUSPENDED = 'account_suspended', 'Account Suspended'
    SECURITY_ALERT = 'security_alert', 'Security Alert'
    SYSTEM = 'system', 'System'


class Notification(models.Model):
    """
    Notification delivered to a user's inbox
    Only the read flags change after creation
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications'
    )

    type = models.CharField(max_length=30, choices=NotificationType.choices, default=NotificationType.SYSTEM)
    title = models.CharField(max_length=200)
    message = models.TextField()
    data = models.JSONField(default=dict, blank=True)
    action_url = models.CharField(max_length=300, blank=True)

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'is_read']),
            models.Index(fields=['user', '-created_at']),
        ]

    def __str__(self):
        return f"{self.user} - {self.title}"

    def mark_as_read(self):
        if not self.is_read:
            self.is_read = True
            self.read_at = timezone.now()
            self.save(update_fields=['is_read', 'read_at'])

    def to_dict(self):
        return {
            'id': str(self.id),
            'type': self.type,
            'title': self.title,
            'message': self.message,
            'data': self.data,
            'actionUrl': self.action_url,
            'isRead': self.is_read,
            'readAt': self.read_at,
            'createdAt': self.created_at,
        }
