from django.urls import path
from . import views

urlpatterns = [
    path('create/', views.create_order, name='create_order'),
    path('mine/', views.get_user_orders, name='get_user_orders'),
    path('farmer/', views.get_farmer_orders, name='get_farmer_orders'),
    path('all/', views.get_all_orders, name='get_all_orders'),
    path('stats/', views.platform_stats, name='platform_stats'),
    path('<uuid:order_id>/', views.get_order_by_id, name='get_order_by_id'),
    path('<uuid:order_id>/payments/', views.get_order_payments, name='get_order_payments'),

    # Lifecycle
    path('<uuid:order_id>/accept/', views.accept_order, name='accept_order'),
    path('<uuid:order_id>/reject/', views.reject_order, name='reject_order'),
    path('<uuid:order_id>/advance/', views.advance_order, name='advance_order'),
    path('<uuid:order_id>/cancel/', views.cancel_order, name='cancel_order'),
    path('<uuid:order_id>/final-payment/', views.record_final_payment, name='record_final_payment'),
]
