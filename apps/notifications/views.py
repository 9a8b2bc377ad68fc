"""
Notifications API views
Location: apps/notifications/views.py
"""

from core.decorators import api_view
from core.responses import json_success
from core.utils import paginate, parse_bool

from apps.users.decorators import api_login_required

from .models import Notification
from .services import notification_service


@api_view('GET', 'DELETE')
@api_login_required
def notification_list(request):
    """
    GET: inbox, newest first (?page, ?limit, ?unreadOnly, ?type)
    DELETE: clear the whole inbox
    """
    if request.method == 'DELETE':
        deleted = notification_service.clear_all(request.user)
        return json_success({'deleted': deleted}, message='All notifications cleared')

    queryset = Notification.objects.filter(user=request.user)

    if parse_bool(request.GET.get('unreadOnly')):
        queryset = queryset.filter(is_read=False)

    notification_type = request.GET.get('type')
    if notification_type:
        queryset = queryset.filter(type=notification_type)

    items, pagination = paginate(queryset, request)

    return json_success({
        'notifications': [n.to_dict() for n in items],
        'pagination': pagination,
        'unreadCount': notification_service.unread_count(request.user),
    })


@api_view('PATCH')
@api_login_required
def mark_read(request, notification_id):
    notification = notification_service.mark_as_read(notification_id, request.user)
    return json_success({'notification': notification.to_dict()}, message='Notification marked as read')


@api_view('PATCH')
@api_login_required
def mark_all_read(request):
    updated = notification_service.mark_all_as_read(request.user)
    return json_success({'updated': updated}, message='All notifications marked as read')


@api_view('DELETE')
@api_login_required
def delete_notification(request, notification_id):
    notification_service.delete(notification_id, request.user)
    return json_success(message='Notification deleted')


@api_view('GET')
@api_login_required
def unread_count(request):
    return json_success({'unreadCount': notification_service.unread_count(request.user)})
