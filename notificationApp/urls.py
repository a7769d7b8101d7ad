from django.urls import path
from . import views

urlpatterns = [
    path('send/', views.send_notification_view, name='send_notification'),
]
