from django.urls import path

from . import views

app_name = 'swaps'

urlpatterns = [
    path('', views.swap_list, name='list'),
    path('stats/', views.swap_stats, name='stats'),
    path('pending/', views.pending_swaps, name='pending'),
    path('active/', views.active_swaps, name='active'),
    path('completed/', views.completed_swaps, name='completed'),
    path('propose/', views.propose_swap, name='propose'),
    path('<uuid:swap_id>/', views.swap_detail, name='detail'),
    path('<uuid:swap_id>/accept/', views.accept_swap, name='accept'),
    path('<uuid:swap_id>/reject/', views.reject_swap, name='reject'),
    path('<uuid:swap_id>/cancel/', views.cancel_swap, name='cancel'),
    path('<uuid:swap_id>/complete/', views.complete_swap, name='complete'),
    path('<uuid:swap_id>/report/', views.report_swap_issue, name='report'),
]
