from django.contrib import admin
from django.utils.html import format_html

from .models import Swap


@admin.register(Swap)
class SwapAdmin(admin.ModelAdmin):
    list_display = ['swap_id_short', 'initiator', 'receiver', 'requested_item_type', 'additional_cash', 'status_badge', 'created_at']
    list_filter = ['status', 'requested_item_type', 'offered_item_type', 'created_at']
    search_fields = ['id', 'initiator__email', 'receiver__email']
    raw_id_fields = ['initiator', 'receiver']
    readonly_fields = ['id', 'responded_at', 'cancelled_at', 'completed_at', 'created_at', 'updated_at']

    fieldsets = (
        ('Parties', {
            'fields': ('id', 'initiator', 'receiver')
        }),
        ('Items', {
            'fields': ('offered_item_type', 'offered_item_id', 'requested_item_type', 'requested_item_id', 'additional_cash', 'currency')
        }),
        ('Status', {
            'fields': ('status', 'message', 'response_note', 'responded_at', 'cancelled_at', 'completed_at')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def swap_id_short(self, obj):
        return str(obj.id)[:8]
    swap_id_short.short_description = 'Swap ID'

    def status_badge(self, obj):
        colors = {
            Swap.Status.PENDING: 'orange',
            Swap.Status.ACCEPTED: 'blue',
            Swap.Status.COMPLETED: 'green',
            Swap.Status.REJECTED: 'red',
            Swap.Status.CANCELLED: 'gray',
        }
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            colors.get(obj.status, 'black'),
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'
