"""
Payments API views
Location: apps/payments/views.py
"""

import logging

from core.decorators import api_view
from core.exceptions import InvalidInput
from core.responses import json_success
from core.utils import paginate, parse_json_body, validate_form

from apps.users.decorators import api_admin_required, api_login_required

from .constants import PAYMENT_METHODS, SUPPORTED_CURRENCIES
from .forms import EscrowForm, InitializePaymentForm, PromotionForm, RefundForm, SubscriptionForm
from .models import Payment
from .serializers import serialize_checkout, serialize_payment
from .services import payment_service

logger = logging.getLogger(__name__)

WEBHOOK_SIGNATURE_HEADER = 'HTTP_X_KORAPAY_SIGNATURE'


def _checkout_response(payment):
    return json_success({'payment': serialize_checkout(payment)}, message='Payment initialized', status=201)


# ==========================================
# REFERENCE DATA
# ==========================================

@api_view('GET')
def currencies(request):
    return json_success({'currencies': SUPPORTED_CURRENCIES})


@api_view('GET')
def payment_methods(request):
    return json_success({'methods': PAYMENT_METHODS})


# ==========================================
# INITIALIZATION
# ==========================================

@api_view('POST')
@api_login_required
def initialize_payment(request):
    data = validate_form(InitializePaymentForm.from_payload(parse_json_body(request)))

    payment = payment_service.initialize(
        request.user,
        data['amount'],
        currency=data['currency'],
        payment_method=data['payment_method'],
        description=data['description'],
        metadata=data['metadata'],
    )
    return _checkout_response(payment)


@api_view('POST')
@api_login_required
def initialize_subscription(request):
    payload = parse_json_body(request)
    form = SubscriptionForm.from_payload(payload)
    if not form.is_valid():
        raise InvalidInput('Invalid subscription plan')

    payment = payment_service.initialize_subscription(
        request.user,
        form.cleaned_data['plan'],
        payment_method=form.cleaned_data['payment_method'],
    )
    return _checkout_response(payment)


@api_view('POST')
@api_login_required
def cancel_subscription(request):
    payment_service.cancel_subscription(request.user)
    return json_success(message='Subscription cancelled')


@api_view('POST')
@api_login_required
def feature_listing(request):
    data = validate_form(PromotionForm.from_payload(parse_json_body(request), id_key='listingId'))

    payment = payment_service.initialize_feature_listing(
        request.user,
        data['listing_id'],
        listing_type=data['listing_type'],
        duration=data['duration'],
    )
    return _checkout_response(payment)


@api_view('POST')
@api_login_required
def boost_ad(request):
    data = validate_form(PromotionForm.from_payload(parse_json_body(request), id_key='adId'))

    payment = payment_service.initialize_boost_ad(
        request.user,
        data['listing_id'],
        listing_type=data['listing_type'],
        duration=data['duration'],
    )
    return _checkout_response(payment)


@api_view('POST')
@api_login_required
def initialize_escrow(request):
    data = validate_form(EscrowForm.from_payload(parse_json_body(request)))
    payment = payment_service.initialize_escrow(request.user, data['swap_id'], data['amount'])
    return _checkout_response(payment)


# ==========================================
# CONFIRMATION
# ==========================================

@api_view('GET')
@api_login_required
def verify_payment(request, reference):
    payment = payment_service.verify(reference, request.user)

    message = (
        'Payment verified successfully'
        if payment.status == Payment.Status.COMPLETED
        else 'Payment verification in progress'
    )

    return json_success(
        {'payment': {
            'reference': payment.reference,
            'amount': str(payment.amount),
            'status': payment.status,
        }},
        message=message
    )


@api_view('POST')
def webhook(request):
    """
    Gateway callback

    Always answers 200 so the gateway doesn't retry; failures are logged.
    """
    try:
        outcome = payment_service.handle_webhook(
            parse_json_body(request),
            raw_body=request.body,
            signature=request.META.get(WEBHOOK_SIGNATURE_HEADER),
        )
    except Exception as e:
        logger.exception(f'Payment webhook error: {str(e)}')
        outcome = 'error'

    return json_success({'received': True, 'outcome': outcome})


# ==========================================
# HISTORY & DETAIL
# ==========================================

@api_view('GET')
@api_login_required
def payment_history(request):
    """The user's payments (?status, ?type, ?page, ?limit)"""
    status = request.GET.get('status')
    if status not in Payment.Status.values:
        status = None

    payment_type = request.GET.get('type')
    if payment_type not in Payment.Type.values:
        payment_type = None

    items, pagination = paginate(payment_service.history(request.user, status, payment_type), request)
    return json_success(
        {'payments': [serialize_payment(p) for p in items]},
        results=len(items),
        pagination=pagination,
    )


@api_view('GET')
@api_login_required
def payment_detail(request, payment_id):
    payment = payment_service.get_for_user(payment_id, request.user)
    return json_success({'payment': serialize_payment(payment)})


@api_view('POST')
@api_login_required
def cancel_payment(request, payment_id):
    payment = payment_service.cancel(payment_id, request.user)
    return json_success({'payment': serialize_payment(payment)}, message='Payment cancelled')


@api_view('POST')
@api_login_required
def refund_payment(request, payment_id):
    data = validate_form(RefundForm.from_payload(parse_json_body(request)))
    payment = payment_service.refund(payment_id, request.user, data['reason'])
    return json_success({'payment': serialize_payment(payment)}, message='Refund request initiated')


@api_view('POST')
@api_admin_required
def admin_refund_payment(request, payment_id):
    data = validate_form(RefundForm.from_payload(parse_json_body(request)))
    payment = payment_service.refund(payment_id, None, data['reason'], admin=request.user)
    return json_success({'payment': serialize_payment(payment)}, message='Refund processed successfully')
