"""
Payments App Models
Payments and the webhook event ledger
"""

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
import uuid

from core.utils import format_currency

from .constants import PAYMENT_METHODS


class Payment(models.Model):
    """
    A charge tracked from initialization to gateway confirmation

    pending → completed | failed | cancelled
    completed → refunded
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        COMPLETED = 'completed', 'Completed'
        FAILED = 'failed', 'Failed'
        REFUNDED = 'refunded', 'Refunded'
        CANCELLED = 'cancelled', 'Cancelled'

    class Type(models.TextChoices):
        SUBSCRIPTION = 'subscription', 'Subscription'
        FEATURE_LISTING = 'feature_listing', 'Featured Listing'
        BOOST_AD = 'boost_ad', 'Boosted Ad'
        ESCROW = 'escrow', 'Escrow'

    METHOD_CHOICES = [(m['value'], m['label']) for m in PAYMENT_METHODS]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='payments'
    )

    reference = models.CharField(max_length=64, unique=True, db_index=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0.01)])
    currency = models.CharField(max_length=3, default='USD')
    payment_method = models.CharField(max_length=20, choices=METHOD_CHOICES, default='card')
    description = models.CharField(max_length=255, blank=True)

    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)

    # Type discriminator plus type-specific fields (plan, listingId, duration...)
    metadata = models.JSONField(default=dict, blank=True)

    # Gateway details
    checkout_url = models.URLField(max_length=500, blank=True)
    transaction_id = models.CharField(max_length=100, blank=True)
    provider_ref = models.CharField(max_length=100, blank=True)
    provider_status = models.CharField(max_length=50, blank=True)
    provider_message = models.TextField(blank=True)

    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'status']),
        ]

    def __str__(self):
        return f"{self.reference} - {self.display_amount} ({self.status})"

    @property
    def payment_type(self):
        return (self.metadata or {}).get('type')

    @property
    def display_amount(self):
        return format_currency(self.amount, self.currency)


class PaymentEvent(models.Model):
    """
    Webhook deliveries already processed, keyed by the gateway event id
    A repeated delivery finds its row here and is skipped
    """

    event_id = models.CharField(max_length=150, unique=True)
    event = models.CharField(max_length=50)
    payment = models.ForeignKey(
        Payment,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='events'
    )
    payload = models.JSONField(default=dict, blank=True)
    outcome = models.CharField(max_length=30, blank=True)
    received_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-received_at']

    def __str__(self):
        return f"{self.event} ({self.event_id})"
