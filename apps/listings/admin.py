"""
Listings App Django Admin
"""

from django.contrib import admin
from django.utils.html import format_html

from apps.notifications.services import notification_service

from .models import ListingStatus, Part, Vehicle


class ListingAdmin(admin.ModelAdmin):
    list_filter = ['status', 'is_featured', 'is_boosted', 'is_reported', 'open_to_swap', 'created_at']
    readonly_fields = ['id', 'slug', 'views', 'report_count', 'created_at', 'updated_at']
    raw_id_fields = ['seller']
    date_hierarchy = 'created_at'
    actions = ['activate_listings', 'deactivate_listings']

    def status_badge(self, obj):
        colors = {
            ListingStatus.ACTIVE: 'green',
            ListingStatus.PENDING: 'orange',
            ListingStatus.SWAPPED: 'blue',
            ListingStatus.SOLD: 'blue',
            ListingStatus.INACTIVE: 'gray',
            ListingStatus.EXPIRED: 'gray',
        }
        return format_html(
            '<span style="color: {};">{}</span>',
            colors.get(obj.status, 'black'),
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'

    def promotion_badge(self, obj):
        if obj.is_featured:
            return format_html('<span style="color: goldenrod; font-weight: bold;">★ Featured</span>')
        if obj.is_boosted:
            return format_html('<span style="color: purple;">▲ Boosted</span>')
        return '-'
    promotion_badge.short_description = 'Promotion'

    def activate_listings(self, request, queryset):
        """Approve pending listings; their sellers are notified"""
        pending = list(queryset.filter(status=ListingStatus.PENDING).select_related('seller'))
        count = queryset.update(status=ListingStatus.ACTIVE)
        for listing in pending:
            notification_service.notify_listing_approved(listing)
        self.message_user(request, f'{count} listing(s) activated.')
    activate_listings.short_description = 'Approve / activate selected listings'

    def deactivate_listings(self, request, queryset):
        count = queryset.update(status=ListingStatus.INACTIVE)
        self.message_user(request, f'{count} listing(s) deactivated.')
    deactivate_listings.short_description = 'Mark selected listings inactive'


@admin.register(Vehicle)
class VehicleAdmin(ListingAdmin):
    list_display = ['title', 'make', 'model', 'year', 'price', 'seller', 'status_badge', 'promotion_badge', 'report_count']
    search_fields = ['title', 'make', 'model', 'seller__email']

    fieldsets = (
        ('Listing', {
            'fields': ('id', 'seller', 'title', 'slug', 'description', 'images', 'status')
        }),
        ('Vehicle', {
            'fields': ('make', 'model', 'year', 'mileage', 'condition', 'body_type', 'transmission', 'fuel_type')
        }),
        ('Pricing', {
            'fields': ('price', 'currency', 'price_negotiable', 'open_to_swap')
        }),
        ('Location', {
            'fields': ('city', 'country')
        }),
        ('Promotion', {
            'fields': ('is_featured', 'featured_until', 'is_boosted', 'boosted_until', 'expires_at')
        }),
        ('Moderation', {
            'fields': ('is_reported', 'report_count', 'views', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(Part)
class PartAdmin(ListingAdmin):
    list_display = ['title', 'part_name', 'category', 'price', 'seller', 'status_badge', 'promotion_badge', 'report_count']
    list_filter = ListingAdmin.list_filter + ['category']
    search_fields = ['title', 'part_name', 'part_number', 'brand', 'seller__email']

    fieldsets = (
        ('Listing', {
            'fields': ('id', 'seller', 'title', 'slug', 'description', 'images', 'status')
        }),
        ('Part', {
            'fields': ('part_name', 'part_number', 'category', 'condition', 'brand', 'compatible_makes', 'quantity')
        }),
        ('Pricing', {
            'fields': ('price', 'currency', 'price_negotiable', 'open_to_swap')
        }),
        ('Location', {
            'fields': ('city', 'country')
        }),
        ('Promotion', {
            'fields': ('is_featured', 'featured_until', 'is_boosted', 'boosted_until', 'expires_at')
        }),
        ('Moderation', {
            'fields': ('is_reported', 'report_count', 'views', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
