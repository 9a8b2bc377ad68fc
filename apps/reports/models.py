"""
Reports App Models
User reports against listings, users, swaps and reviews
"""

from django.conf import settings
from django.db import models
import uuid


class Report(models.Model):

    class ItemType(models.TextChoices):
        VEHICLE = 'vehicle', 'Vehicle'
        PART = 'part', 'Part'
        USER = 'user', 'User'
        SWAP = 'swap', 'Swap'
        REVIEW = 'review', 'Review'

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        REVIEWED = 'reviewed', 'Under Review'
        RESOLVED = 'resolved', 'Resolved'
        DISMISSED = 'dismissed', 'Dismissed'

    class Action(models.TextChoices):
        REMOVE_ITEM = 'remove_item', 'Remove Item'
        BAN_USER = 'ban_user', 'Ban User'
        SUSPEND_ITEM = 'suspend_item', 'Suspend Item'
        NO_ACTION = 'no_action', 'No Action'

    CLOSED_STATUSES = (Status.RESOLVED, Status.DISMISSED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    reporter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='reports_filed'
    )

    item_type = models.CharField(max_length=10, choices=ItemType.choices)
    item_id = models.UUIDField()

    reason = models.CharField(max_length=200)
    description = models.TextField(blank=True)

    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    action_taken = models.CharField(max_length=20, choices=Action.choices, blank=True)
    resolution = models.TextField(blank=True)
    resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reports_resolved'
    )
    resolved_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['item_type', 'item_id']),
            models.Index(fields=['status']),
        ]

    def __str__(self):
        return f"{self.get_item_type_display()} report by {self.reporter} ({self.status})"

    @property
    def is_closed(self):
        return self.status in self.CLOSED_STATUSES
