"""
Reports App Forms
"""

from django import forms

from .models import Report


class ReportForm(forms.Form):
    item_type = forms.ChoiceField(
        choices=Report.ItemType.choices,
        error_messages={'invalid_choice': 'Invalid item type'}
    )
    item_id = forms.CharField(max_length=64)
    reason = forms.CharField(max_length=200)
    description = forms.CharField(max_length=2000, required=False)

    @classmethod
    def from_payload(cls, payload):
        return cls({
            'item_type': payload.get('itemType'),
            'item_id': payload.get('itemId'),
            'reason': payload.get('reason'),
            'description': payload.get('description'),
        })


class ResolveReportForm(forms.Form):
    # Checked against Report.Action by the moderation service
    action = forms.CharField(max_length=20)
    resolution = forms.CharField(max_length=2000, required=False)

    @classmethod
    def from_payload(cls, payload):
        return cls({'action': payload.get('action'), 'resolution': payload.get('resolution')})


class UpdateReportForm(forms.Form):
    status = forms.ChoiceField(
        choices=[
            (Report.Status.PENDING, Report.Status.PENDING.label),
            (Report.Status.REVIEWED, Report.Status.REVIEWED.label),
        ],
        required=False,
        error_messages={'invalid_choice': 'Invalid status'}
    )
    resolution = forms.CharField(max_length=2000, required=False)

    @classmethod
    def from_payload(cls, payload):
        return cls({'status': payload.get('status'), 'resolution': payload.get('resolution')})
