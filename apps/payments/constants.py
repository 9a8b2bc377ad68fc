"""
Payment constants exposed to clients
"""

SUPPORTED_CURRENCIES = [
    {'code': 'USD', 'name': 'US Dollar', 'symbol': '$'},
    {'code': 'EUR', 'name': 'Euro', 'symbol': '€'},
    {'code': 'GBP', 'name': 'British Pound', 'symbol': '£'},
    {'code': 'NGN', 'name': 'Nigerian Naira', 'symbol': '₦'},
    {'code': 'GHS', 'name': 'Ghanaian Cedi', 'symbol': 'GH₵'},
    {'code': 'KES', 'name': 'Kenyan Shilling', 'symbol': 'KSh'},
    {'code': 'ZAR', 'name': 'South African Rand', 'symbol': 'R'},
]

CURRENCY_CODES = frozenset(c['code'] for c in SUPPORTED_CURRENCIES)

PAYMENT_METHODS = [
    {'value': 'card', 'label': 'Credit/Debit Card', 'icon': 'credit-card'},
    {'value': 'bank_transfer', 'label': 'Bank Transfer', 'icon': 'bank'},
    {'value': 'mobile_money', 'label': 'Mobile Money', 'icon': 'mobile'},
    {'value': 'cash', 'label': 'Cash', 'icon': 'money'},
]

# Reference prefix per payment type
REFERENCE_PREFIXES = {
    None: 'PAY',
    'subscription': 'SUB',
    'feature_listing': 'FEAT',
    'boost_ad': 'BOOST',
    'escrow': 'ESC',
}

# Webhook event names sent by the gateway
EVENT_PAYMENT_SUCCESS = 'payment.success'
EVENT_PAYMENT_FAILED = 'payment.failed'
EVENT_REFUND_PROCESSED = 'refund.processed'
