from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['title', 'user', 'type', 'is_read', 'created_at']
    list_filter = ['type', 'is_read', 'created_at']
    search_fields = ['title', 'message', 'user__email']
    readonly_fields = ['id', 'created_at', 'read_at']
    raw_id_fields = ['user']
    actions = ['mark_as_read']

    def mark_as_read(self, request, queryset):
        count = queryset.filter(is_read=False).count()
        for notification in queryset.filter(is_read=False):
            notification.mark_as_read()
        self.message_user(request, f'{count} notification(s) marked as read.')
    mark_as_read.short_description = 'Mark selected as read'
