from django.urls import path

from . import views

app_name = 'listings'

urlpatterns = [
    path('vehicles/', views.vehicle_list, name='vehicle_list'),
    path('vehicles/<uuid:vehicle_id>/', views.vehicle_detail, name='vehicle_detail'),
    path('parts/', views.part_list, name='part_list'),
    path('parts/<uuid:part_id>/', views.part_detail, name='part_detail'),
]
