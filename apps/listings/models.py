"""
Listings App Models
Vehicles and parts offered for sale or swap
"""

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.text import slugify
import uuid
from datetime import timedelta


class ListingKind(models.TextChoices):
    VEHICLE = 'vehicle', 'Vehicle'
    PART = 'part', 'Part'


class ListingStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    PENDING = 'pending', 'Pending'
    SOLD = 'sold', 'Sold'
    SWAPPED = 'swapped', 'Swapped'
    INACTIVE = 'inactive', 'Inactive'
    EXPIRED = 'expired', 'Expired'


class Listing(models.Model):
    """
    Fields shared by every kind of listing
    Mutated by the owner, by swap completion (status) and by
    promotion payments (featured / boosted flags)
    """

    kind = None

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='%(class)ss'
    )

    title = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, blank=True)
    description = models.TextField(blank=True)
    images = models.JSONField(default=list, blank=True)

    # Pricing
    price = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    currency = models.CharField(max_length=3, default='USD')
    price_negotiable = models.BooleanField(default=True)
    open_to_swap = models.BooleanField(default=False)

    # Location
    city = models.CharField(max_length=100, blank=True)
    country = models.CharField(max_length=100, blank=True)

    status = models.CharField(max_length=10, choices=ListingStatus.choices, default=ListingStatus.ACTIVE)

    # Promotion
    is_featured = models.BooleanField(default=False)
    featured_until = models.DateTimeField(null=True, blank=True)
    is_boosted = models.BooleanField(default=False)
    boosted_until = models.DateTimeField(null=True, blank=True)

    # Moderation & stats
    views = models.PositiveIntegerField(default=0)
    is_reported = models.BooleanField(default=False)
    report_count = models.PositiveIntegerField(default=0)

    expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} ({self.status})"

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.title)[:200]
        super().save(*args, **kwargs)

    @property
    def is_available(self):
        return self.status == ListingStatus.ACTIVE

    def promote(self, flag: str, days: int):
        """
        Turn on a promotion flag ('featured' or 'boosted') for `days` days

        Returns:
            The new expiry timestamp
        """
        until = timezone.now() + timedelta(days=days)
        setattr(self, f'is_{flag}', True)
        setattr(self, f'{flag}_until', until)
        self.save(update_fields=[f'is_{flag}', f'{flag}_until', 'updated_at'])
        return until


class Vehicle(Listing):

    kind = ListingKind.VEHICLE

    CONDITION_CHOICES = [
        ('new', 'New'),
        ('used', 'Used'),
        ('certified_pre_owned', 'Certified Pre-Owned'),
    ]

    make = models.CharField(max_length=100)
    model = models.CharField(max_length=100)
    year = models.PositiveIntegerField()
    mileage = models.PositiveIntegerField(default=0)
    condition = models.CharField(max_length=30, choices=CONDITION_CHOICES, default='used')
    body_type = models.CharField(max_length=50, blank=True)
    transmission = models.CharField(max_length=50, blank=True)
    fuel_type = models.CharField(max_length=50, blank=True)

    class Meta(Listing.Meta):
        verbose_name = "Vehicle"
        verbose_name_plural = "Vehicles"
        indexes = [
            models.Index(fields=['status', 'make', 'model']),
            models.Index(fields=['seller', 'status']),
        ]


class Part(Listing):

    kind = ListingKind.PART

    CONDITION_CHOICES = [
        ('new', 'New'),
        ('used', 'Used'),
        ('refurbished', 'Refurbished'),
        ('salvage', 'Salvage'),
        ('oem', 'OEM'),
        ('aftermarket', 'Aftermarket'),
    ]

    CATEGORY_CHOICES = [
        ('engine', 'Engine'),
        ('transmission', 'Transmission'),
        ('suspension', 'Suspension'),
        ('brakes', 'Brakes'),
        ('electrical', 'Electrical'),
        ('body', 'Body'),
        ('interior', 'Interior'),
        ('exterior', 'Exterior'),
        ('wheels_tires', 'Wheels & Tires'),
        ('exhaust', 'Exhaust'),
        ('cooling', 'Cooling'),
        ('fuel_system', 'Fuel System'),
        ('lights', 'Lights'),
        ('accessories', 'Accessories'),
        ('other', 'Other'),
    ]

    part_name = models.CharField(max_length=150)
    part_number = models.CharField(max_length=100, blank=True)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default='other')
    condition = models.CharField(max_length=20, choices=CONDITION_CHOICES, default='used')
    brand = models.CharField(max_length=100, blank=True)
    compatible_makes = models.JSONField(default=list, blank=True)
    quantity = models.PositiveIntegerField(default=1)

    class Meta(Listing.Meta):
        verbose_name = "Part"
        verbose_name_plural = "Parts"
        indexes = [
            models.Index(fields=['status', 'category']),
            models.Index(fields=['seller', 'status']),
        ]


LISTING_MODELS = {
    ListingKind.VEHICLE: Vehicle,
    ListingKind.PART: Part,
}


def get_listing_model(kind):
    """Model class for a listing kind, None for unknown kinds"""
    return LISTING_MODELS.get(kind)


def get_listing(kind, listing_id, for_update=False):
    """
    Fetch a listing by kind and id

    Returns None when the kind is unknown, the id is malformed or the
    listing doesn't exist.
    """
    model = get_listing_model(kind)
    if model is None or not listing_id:
        return None

    queryset = model.objects.select_for_update() if for_update else model.objects.all()

    try:
        return queryset.get(pk=listing_id)
    except (model.DoesNotExist, ValidationError, ValueError):
        # Malformed UUIDs raise ValidationError from the field
        return None
