"""
Swaps App Forms
Validate JSON request bodies before they reach the swap service
"""

from django import forms

from apps.listings.models import ListingKind


class ProposeSwapForm(forms.Form):
    offered_item_id = forms.UUIDField(error_messages={'required': 'Offered vehicle is required'})
    offered_item_type = forms.ChoiceField(choices=ListingKind.choices, required=False)
    requested_item_type = forms.ChoiceField(choices=ListingKind.choices)
    requested_item_id = forms.UUIDField()
    message = forms.CharField(max_length=2000, required=False)
    additional_cash = forms.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    currency = forms.CharField(min_length=3, max_length=3, required=False)

    def clean_offered_item_type(self):
        return self.cleaned_data.get('offered_item_type') or ListingKind.VEHICLE

    def clean_currency(self):
        currency = self.cleaned_data.get('currency')
        return currency.upper() if currency else 'USD'

    @classmethod
    def from_payload(cls, payload):
        """Bind the camelCase API body"""
        return cls({
            'offered_item_id': payload.get('offeredVehicleId') or payload.get('offeredItemId'),
            'offered_item_type': payload.get('offeredItemType'),
            'requested_item_type': payload.get('requestedItemType'),
            'requested_item_id': payload.get('requestedItemId'),
            'message': payload.get('message'),
            'additional_cash': payload.get('additionalCash'),
            'currency': payload.get('currency'),
        })


class SwapResponseForm(forms.Form):
    response_note = forms.CharField(max_length=2000, required=False)

    @classmethod
    def from_payload(cls, payload):
        return cls({'response_note': payload.get('responseNote')})


class SwapIssueForm(forms.Form):
    reason = forms.CharField(max_length=200)
    description = forms.CharField(max_length=2000, required=False)

    @classmethod
    def from_payload(cls, payload):
        return cls({'reason': payload.get('reason'), 'description': payload.get('description')})
