"""
Payments App Forms
"""

from django import forms

from apps.listings.models import ListingKind

from .models import Payment

MIN_PROMOTION_DAYS = 1
MAX_PROMOTION_DAYS = 90


class InitializePaymentForm(forms.Form):
    # Amount positivity is the service's call; the form only checks it's a number
    amount = forms.DecimalField(max_digits=12, decimal_places=2, error_messages={'required': 'Invalid amount'})
    currency = forms.CharField(min_length=3, max_length=3, required=False)
    payment_method = forms.ChoiceField(choices=Payment.METHOD_CHOICES, required=False)
    description = forms.CharField(max_length=255, required=False)
    metadata = forms.JSONField(required=False)

    def clean_metadata(self):
        metadata = self.cleaned_data.get('metadata') or {}
        if not isinstance(metadata, dict):
            raise forms.ValidationError('Metadata must be an object')

        payment_type = metadata.get('type')
        if payment_type is not None and (
            not isinstance(payment_type, str) or payment_type not in Payment.Type.values
        ):
            raise forms.ValidationError('Invalid payment type')

        listing_type = metadata.get('listingType')
        if listing_type is not None and (
            not isinstance(listing_type, str) or listing_type not in ListingKind.values
        ):
            raise forms.ValidationError('Invalid listing type')

        duration = metadata.get('duration')
        if duration is not None and (
            isinstance(duration, bool) or not isinstance(duration, int)
            or not MIN_PROMOTION_DAYS <= duration <= MAX_PROMOTION_DAYS
        ):
            raise forms.ValidationError(
                f'Duration must be a whole number of days between {MIN_PROMOTION_DAYS} and {MAX_PROMOTION_DAYS}'
            )

        return metadata

    @classmethod
    def from_payload(cls, payload):
        return cls({
            'amount': payload.get('amount'),
            'currency': payload.get('currency'),
            'payment_method': payload.get('paymentMethod'),
            'description': payload.get('description'),
            'metadata': payload.get('metadata'),
        })


class SubscriptionForm(forms.Form):
    plan = forms.CharField(max_length=20, error_messages={'required': 'Invalid subscription plan'})
    payment_method = forms.ChoiceField(choices=Payment.METHOD_CHOICES, required=False)

    @classmethod
    def from_payload(cls, payload):
        return cls({'plan': payload.get('plan'), 'payment_method': payload.get('paymentMethod')})


class PromotionForm(forms.Form):
    listing_id = forms.UUIDField()
    listing_type = forms.ChoiceField(choices=ListingKind.choices, required=False)
    duration = forms.IntegerField(min_value=MIN_PROMOTION_DAYS, max_value=MAX_PROMOTION_DAYS, required=False)

    def clean_listing_type(self):
        return self.cleaned_data.get('listing_type') or ListingKind.VEHICLE

    @classmethod
    def from_payload(cls, payload, id_key='listingId'):
        return cls({
            'listing_id': payload.get(id_key),
            'listing_type': payload.get('listingType'),
            'duration': payload.get('duration'),
        })


class EscrowForm(forms.Form):
    swap_id = forms.UUIDField()
    amount = forms.DecimalField(max_digits=12, decimal_places=2, error_messages={'required': 'Invalid amount'})

    @classmethod
    def from_payload(cls, payload):
        return cls({'swap_id': payload.get('swapId'), 'amount': payload.get('amount')})


class RefundForm(forms.Form):
    reason = forms.CharField(max_length=500, required=False)

    @classmethod
    def from_payload(cls, payload):
        return cls({'reason': payload.get('reason')})
