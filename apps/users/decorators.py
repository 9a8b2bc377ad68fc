"""
Users App Decorators
Access control for JSON API views. These raise API errors; wrap the
view with core.decorators.api_view so they become JSON envelopes.
"""

from functools import wraps

from core.exceptions import Forbidden, Unauthorized


def api_login_required(view_func):
    """
    Decorator to ensure the caller is authenticated and allowed to act

    - 401 when not authenticated
    - 403 when the account is banned or suspended

    Usage:
        @api_view('POST')
        @api_login_required
        def propose_swap(request):
            ...
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            raise Unauthorized('Authentication required')

        if request.user.is_restricted:
            raise Forbidden(f'Your account is {request.user.account_status}')

        return view_func(request, *args, **kwargs)

    return wrapper


def api_admin_required(view_func):
    """
    Decorator for moderation/admin endpoints
    Staff users and users with the admin role pass
    """
    @wraps(view_func)
    @api_login_required
    def wrapper(request, *args, **kwargs):
        if not request.user.is_admin_role:
            raise Forbidden('Admin access required')

        return view_func(request, *args, **kwargs)

    return wrapper
