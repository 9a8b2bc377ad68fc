"""
API view decorator
Maps the error taxonomy to HTTP responses in one place
"""

import logging
from functools import wraps

from django.conf import settings
from django.http import Http404
from django.views.decorators.csrf import csrf_exempt

from .exceptions import ApiError
from .responses import json_error

logger = logging.getLogger(__name__)


def api_view(*methods):
    """
    Decorator for JSON API endpoints

    - rejects methods not listed with 405
    - ApiError subclasses become {"status": "error"} envelopes
    - anything else is logged and returned as a 500; the message is
      only exposed when DEBUG is on

    Usage:
        @api_view('POST')
        @api_login_required
        def propose_swap(request):
            ...
    """
    allowed = {m.upper() for m in methods} or {'GET'}

    def decorator(view_func):
        @csrf_exempt
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if request.method not in allowed:
                response = json_error(f'Method {request.method} not allowed', status=405)
                response['Allow'] = ', '.join(sorted(allowed))
                return response

            try:
                return view_func(request, *args, **kwargs)

            except ApiError as e:
                if e.status_code >= 500:
                    logger.error(f'{view_func.__name__} failed: {e.message}')
                return json_error(e.message, status=e.status_code, errors=e.errors)

            except Http404 as e:
                return json_error(str(e) or 'Resource not found', status=404)

            except Exception as e:
                logger.exception(f'Unhandled error in {view_func.__name__}: {str(e)}')
                message = str(e) if settings.DEBUG else 'Internal server error'
                return json_error(message, status=500)

        return wrapper

    return decorator
