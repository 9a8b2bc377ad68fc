"""
Payments App Django Admin
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import Payment, PaymentEvent
from .services import payment_service


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['reference', 'user', 'amount_display', 'payment_type', 'status_badge', 'created_at']
    list_filter = ['status', 'currency', 'payment_method', 'created_at']
    search_fields = ['reference', 'transaction_id', 'user__email']
    readonly_fields = ['id', 'reference', 'transaction_id', 'provider_ref', 'provider_status',
                       'provider_message', 'checkout_url', 'paid_at', 'created_at', 'updated_at']
    raw_id_fields = ['user']
    date_hierarchy = 'created_at'
    actions = ['refund_payments']

    fieldsets = (
        ('Payment', {
            'fields': ('id', 'user', 'reference', 'amount', 'currency', 'payment_method', 'description', 'status')
        }),
        ('Metadata', {
            'fields': ('metadata',)
        }),
        ('Gateway', {
            'fields': ('checkout_url', 'transaction_id', 'provider_ref', 'provider_status', 'provider_message'),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('paid_at', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def amount_display(self, obj):
        return obj.display_amount
    amount_display.short_description = 'Amount'

    def status_badge(self, obj):
        colors = {
            Payment.Status.PENDING: 'orange',
            Payment.Status.COMPLETED: 'green',
            Payment.Status.FAILED: 'red',
            Payment.Status.REFUNDED: 'blue',
            Payment.Status.CANCELLED: 'gray',
        }
        return format_html(
            '<span style="color: {};">{}</span>',
            colors.get(obj.status, 'black'),
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'

    def refund_payments(self, request, queryset):
        """Refund completed payments through the payment service"""
        refunded = 0
        for payment in queryset.filter(status=Payment.Status.COMPLETED):
            payment_service.refund(payment.pk, None, 'Refunded from admin', admin=request.user)
            refunded += 1
        self.message_user(request, f'{refunded} payment(s) refunded.')
    refund_payments.short_description = 'Refund selected completed payments'


@admin.register(PaymentEvent)
class PaymentEventAdmin(admin.ModelAdmin):
    list_display = ['event_id', 'event', 'payment', 'outcome', 'received_at']
    list_filter = ['event', 'outcome']
    search_fields = ['event_id', 'payment__reference']
    readonly_fields = ['event_id', 'event', 'payment', 'payload', 'outcome', 'received_at']
