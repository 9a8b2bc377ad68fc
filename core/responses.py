"""
JSON envelope helpers shared by every API view.

Success: {"status": "success", "message": ..., "data": {...}}
Error:   {"status": "error", "message": ..., "errors": {...}}
"""

from django.http import JsonResponse


def json_success(data=None, message=None, status=200, **extra):
    payload = {'status': 'success'}
    if message:
        payload['message'] = str(message)
    payload.update(extra)
    if data is not None:
        payload['data'] = data
    return JsonResponse(payload, status=status)


def json_error(message, status=400, errors=None):
    payload = {'status': 'error', 'message': str(message)}
    if errors:
        payload['errors'] = errors
    return JsonResponse(payload, status=status)
