"""
Swaps API views
Location: apps/swaps/views.py
"""

from core.decorators import api_view
from core.responses import json_success
from core.utils import paginate, parse_json_body, validate_form

from apps.reports.services import moderation_service
from apps.users.decorators import api_login_required

from .forms import ProposeSwapForm, SwapIssueForm, SwapResponseForm
from .models import Swap
from .serializers import serialize_swap
from .services import swap_service


def _swap_page(request, queryset):
    items, pagination = paginate(queryset, request)
    return json_success(
        {'swaps': [serialize_swap(swap) for swap in items]},
        results=len(items),
        pagination=pagination,
    )


# ==========================================
# READS
# ==========================================

@api_view('GET')
@api_login_required
def swap_list(request):
    """All swaps the user is part of (?status, ?page, ?limit)"""
    status = request.GET.get('status')
    if status not in Swap.Status.values:
        status = None
    return _swap_page(request, swap_service.for_user(request.user, status))


@api_view('GET')
@api_login_required
def swap_stats(request):
    return json_success({'stats': swap_service.stats(request.user)})


@api_view('GET')
@api_login_required
def pending_swaps(request):
    """Proposals waiting on the current user"""
    return _swap_page(request, swap_service.pending_for(request.user))


@api_view('GET')
@api_login_required
def active_swaps(request):
    return _swap_page(request, swap_service.for_user(request.user, Swap.Status.ACCEPTED))


@api_view('GET')
@api_login_required
def completed_swaps(request):
    return _swap_page(request, swap_service.for_user(request.user, Swap.Status.COMPLETED))


@api_view('GET')
@api_login_required
def swap_detail(request, swap_id):
    swap = swap_service.get_for_party(swap_id, request.user)
    return json_success({'swap': serialize_swap(swap)})


# ==========================================
# LIFECYCLE
# ==========================================

@api_view('POST')
@api_login_required
def propose_swap(request):
    data = validate_form(ProposeSwapForm.from_payload(parse_json_body(request)))

    swap = swap_service.propose(
        initiator=request.user,
        offered_item_id=data['offered_item_id'],
        offered_item_type=data['offered_item_type'],
        requested_item_type=data['requested_item_type'],
        requested_item_id=data['requested_item_id'],
        message=data['message'],
        additional_cash=data['additional_cash'],
        currency=data['currency'],
    )

    return json_success({'swap': serialize_swap(swap)}, message='Swap proposal sent successfully', status=201)


@api_view('PATCH')
@api_login_required
def accept_swap(request, swap_id):
    data = validate_form(SwapResponseForm.from_payload(parse_json_body(request)))
    swap = swap_service.accept(swap_id, request.user, data['response_note'])
    return json_success({'swap': serialize_swap(swap)}, message='Swap accepted')


@api_view('PATCH')
@api_login_required
def reject_swap(request, swap_id):
    data = validate_form(SwapResponseForm.from_payload(parse_json_body(request)))
    swap = swap_service.reject(swap_id, request.user, data['response_note'])
    return json_success({'swap': serialize_swap(swap)}, message='Swap rejected')


@api_view('PATCH')
@api_login_required
def cancel_swap(request, swap_id):
    swap = swap_service.cancel(swap_id, request.user)
    return json_success({'swap': serialize_swap(swap, include_items=False)}, message='Swap cancelled')


@api_view('PATCH')
@api_login_required
def complete_swap(request, swap_id):
    swap = swap_service.complete(swap_id, request.user)
    return json_success({'swap': serialize_swap(swap)}, message='Swap completed successfully')


@api_view('POST')
@api_login_required
def report_swap_issue(request, swap_id):
    """Parties can flag a swap for moderator review"""
    swap = swap_service.get_for_party(swap_id, request.user)
    data = validate_form(SwapIssueForm.from_payload(parse_json_body(request)))

    report = moderation_service.submit(
        reporter=request.user,
        item_type='swap',
        item_id=swap.id,
        reason=data['reason'],
        description=data['description'],
    )

    return json_success({'reportId': str(report.id)}, message='Issue reported successfully', status=201)
