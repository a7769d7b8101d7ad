from django.urls import path
from . import views

urlpatterns = [
    path('', views.list_visible_farmers, name='list_visible_farmers'),
    path('profile/', views.my_profile, name='my_farmer_profile'),

    # Verification (admin only)
    path('pending/', views.list_pending_farmers, name='list_pending_farmers'),
    path('all/', views.list_all_farmers, name='list_all_farmers'),
    path('<uuid:farmer_id>/review/', views.review_farmer, name='review_farmer'),

    path('<uuid:farmer_id>/', views.get_farmer_by_id, name='get_farmer_by_id'),
]
