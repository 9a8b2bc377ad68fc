"""
Payments App URLs
"""

from django.urls import path

from . import views

app_name = 'payments'

urlpatterns = [
    path('currencies/', views.currencies, name='currencies'),
    path('methods/', views.payment_methods, name='methods'),
    path('initialize/', views.initialize_payment, name='initialize'),
    path('verify/<str:reference>/', views.verify_payment, name='verify'),
    path('webhook/', views.webhook, name='webhook'),
    path('history/', views.payment_history, name='history'),

    path('subscription/initialize/', views.initialize_subscription, name='subscription_initialize'),
    path('subscription/cancel/', views.cancel_subscription, name='subscription_cancel'),
    path('feature-listing/', views.feature_listing, name='feature_listing'),
    path('boost-ad/', views.boost_ad, name='boost_ad'),
    path('escrow/initialize/', views.initialize_escrow, name='escrow_initialize'),

    path('<uuid:payment_id>/', views.payment_detail, name='detail'),
    path('<uuid:payment_id>/cancel/', views.cancel_payment, name='cancel'),
    path('<uuid:payment_id>/refund/', views.refund_payment, name='refund'),
    path('<uuid:payment_id>/admin/refund/', views.admin_refund_payment, name='admin_refund'),
]
