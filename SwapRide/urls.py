"""
Main URL configuration for SwapRide project.
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),

    # ==========================================
    # API v1
    # ==========================================
    path('api/v1/users/', include('apps.users.urls')),
    path('api/v1/', include('apps.listings.urls')),
    path('api/v1/swaps/', include('apps.swaps.urls')),
    path('api/v1/payments/', include('apps.payments.urls')),
    path('api/v1/notifications/', include('apps.notifications.urls')),
    path('api/v1/reports/', include('apps.reports.urls')),
]

if settings.DEBUG:
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
