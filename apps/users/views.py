"""
Users API views
Location: apps/users/views.py
"""

from core.decorators import api_view
from core.responses import json_success

from .decorators import api_login_required


def serialize_profile(user):
    return {
        **user.summary(),
        'email': user.email,
        'phone': user.phone,
        'role': user.role,
        'accountStatus': user.account_status,
        'totalSwaps': user.total_swaps,
        'reviewCount': user.review_count,
        'subscription': {
            'plan': user.subscription_plan,
            'isActive': user.subscription_is_active,
            'startDate': user.subscription_start_date,
            'endDate': user.subscription_end_date,
        },
        'notificationSettings': {
            'email': user.notification_email,
            'sms': user.notification_sms,
            'push': user.notification_push,
        },
    }


@api_view('GET')
@api_login_required
def me(request):
    """Current user's profile, stats and subscription"""
    return json_success({'user': serialize_profile(request.user)})
