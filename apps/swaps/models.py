"""
Swaps App Models
A proposed exchange of two listings, optionally plus cash
"""

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
import uuid

from apps.listings.models import ListingKind, get_listing


class Swap(models.Model):
    """
    Swap proposal between an initiator and the owner of the requested item

    pending → accepted → completed
    pending → rejected | cancelled
    accepted → cancelled
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        ACCEPTED = 'accepted', 'Accepted'
        REJECTED = 'rejected', 'Rejected'
        CANCELLED = 'cancelled', 'Cancelled'
        COMPLETED = 'completed', 'Completed'

    TERMINAL_STATUSES = (Status.REJECTED, Status.CANCELLED, Status.COMPLETED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    initiator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='swaps_initiated'
    )
    receiver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='swaps_received'
    )

    # Items are vehicles or parts, referenced by kind + id
    offered_item_type = models.CharField(max_length=10, choices=ListingKind.choices, default=ListingKind.VEHICLE)
    offered_item_id = models.UUIDField()
    requested_item_type = models.CharField(max_length=10, choices=ListingKind.choices)
    requested_item_id = models.UUIDField()

    message = models.TextField(blank=True)
    additional_cash = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0)]
    )
    currency = models.CharField(max_length=3, default='USD')

    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    response_note = models.TextField(blank=True)

    responded_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['initiator', 'status']),
            models.Index(fields=['receiver', 'status']),
        ]

    def __str__(self):
        return f"Swap {str(self.id)[:8]} ({self.status})"

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES

    @property
    def offered_item(self):
        return get_listing(self.offered_item_type, self.offered_item_id)

    @property
    def requested_item(self):
        return get_listing(self.requested_item_type, self.requested_item_id)

    def is_party(self, user):
        return user.pk in (self.initiator_id, self.receiver_id)

    def other_party(self, user):
        return self.receiver if user.pk == self.initiator_id else self.initiator
