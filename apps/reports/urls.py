from django.urls import path

from . import views

app_name = 'reports'

urlpatterns = [
    path('', views.report_list, name='list'),
    path('mine/', views.my_reports, name='mine'),
    path('<uuid:report_id>/', views.report_detail, name='detail'),
    path('<uuid:report_id>/resolve/', views.resolve_report, name='resolve'),
    path('<uuid:report_id>/dismiss/', views.dismiss_report, name='dismiss'),
]
