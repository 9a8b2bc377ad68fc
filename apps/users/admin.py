from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import CustomUser, Review


class CustomUserAdmin(UserAdmin):
    model = CustomUser
    list_display = ('email', 'get_full_name', 'role', 'account_status', 'subscription_plan', 'total_swaps', 'is_active')
    list_filter = ('role', 'account_status', 'subscription_plan', 'is_active')
    ordering = ('email',)
    search_fields = ('email', 'first_name', 'last_name', 'phone')
    readonly_fields = ('total_swaps', 'rating', 'review_count', 'date_joined')

    fieldsets = (
        (None, {'fields': ('email', 'password', 'clerk_id')}),
        ('Personal info', {'fields': ('first_name', 'last_name', 'username', 'phone', 'avatar_url')}),
        ('Account', {'fields': ('role', 'account_status', 'ban_reason')}),
        ('Subscription', {
            'fields': (
                'subscription_plan', 'subscription_is_active',
                'subscription_start_date', 'subscription_end_date'
            )
        }),
        ('Stats', {'fields': ('total_swaps', 'rating', 'review_count', 'date_joined')}),
        ('Notifications', {'fields': ('notification_email', 'notification_sms', 'notification_push')}),
        ('Permissions', {'fields': ('is_active', 'is_staff', 'is_superuser')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'password1', 'password2', 'role', 'is_active')}
        ),
    )


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ['reviewer', 'reviewed_user', 'rating', 'status', 'created_at']
    list_filter = ['status', 'rating']
    search_fields = ['reviewer__email', 'reviewed_user__email', 'comment']


admin.site.register(CustomUser, CustomUserAdmin)
