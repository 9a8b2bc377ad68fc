from django.contrib import admin
from django.utils.html import format_html

from .models import Report
from .services import moderation_service


@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    list_display = ['report_id_short', 'item_type', 'item_id', 'reason', 'reporter', 'status_badge', 'created_at']
    list_filter = ['status', 'item_type', 'action_taken', 'created_at']
    search_fields = ['reason', 'description', 'reporter__email', 'item_id']
    raw_id_fields = ['reporter', 'resolved_by']
    readonly_fields = ['id', 'reporter', 'item_type', 'item_id', 'resolved_by', 'resolved_at', 'created_at', 'updated_at']
    actions = ['dismiss_reports']

    fieldsets = (
        ('Report', {
            'fields': ('id', 'reporter', 'item_type', 'item_id', 'reason', 'description')
        }),
        ('Moderation', {
            'fields': ('status', 'action_taken', 'resolution', 'resolved_by', 'resolved_at')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def report_id_short(self, obj):
        return str(obj.id)[:8]
    report_id_short.short_description = 'Report ID'

    def status_badge(self, obj):
        colors = {
            Report.Status.PENDING: 'orange',
            Report.Status.REVIEWED: 'blue',
            Report.Status.RESOLVED: 'green',
            Report.Status.DISMISSED: 'gray',
        }
        return format_html(
            '<span style="color: {};">{}</span>',
            colors.get(obj.status, 'black'),
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'

    def dismiss_reports(self, request, queryset):
        """Dismiss selected open reports (reporters are notified)"""
        count = 0
        for report in queryset.exclude(status__in=Report.CLOSED_STATUSES):
            moderation_service.dismiss(report.id, request.user, 'Dismissed by admin')
            count += 1
        self.message_user(request, f'{count} report(s) dismissed.')
    dismiss_reports.short_description = 'Dismiss selected reports'
