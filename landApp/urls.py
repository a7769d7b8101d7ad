from django.urls import path
from . import views

urlpatterns = [
    path('', views.list_visible_listings, name='list_visible_listings'),
    path('create/', views.create_listing, name='create_listing'),
    path('mine/', views.my_listings, name='my_listings'),
    path('<uuid:listing_id>/', views.get_listing_by_id, name='get_listing_by_id'),
    path('<uuid:listing_id>/update/', views.update_listing, name='update_listing'),
    path('<uuid:listing_id>/toggle/', views.toggle_listing, name='toggle_listing'),
    path('<uuid:listing_id>/delete/', views.delete_listing, name='delete_listing'),
]
