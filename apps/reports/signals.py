"""
Reports App Signals
Flag listings when they pick up a new report
"""

from django.db.models import F
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils import timezone

from apps.listings.models import get_listing_model

from .models import Report


@receiver(post_save, sender=Report)
def flag_reported_listing(sender, instance, created, **kwargs):
    """
    Mark a vehicle/part as reported and bump its report counter
    Other target kinds carry no counters
    """
    if not created:
        return

    model = get_listing_model(instance.item_type)
    if model is None:
        return

    model.objects.filter(pk=instance.item_id).update(
        is_reported=True,
        report_count=F('report_count') + 1,
        updated_at=timezone.now()
    )
