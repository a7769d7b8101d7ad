from django.urls import path
from . import views

urlpatterns = [
    path('phases/', views.list_growth_phases, name='list_growth_phases'),
    path('orders/<uuid:order_id>/', views.order_growth_updates, name='order_growth_updates'),
]
