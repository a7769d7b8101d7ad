from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView
from .views import (
    register_user,
    login_user,
    logout_user,
    get_logged_in_user,
    list_all_users,
)

urlpatterns = [
    path('register/', register_user, name='register_user'),
    path('login/', login_user, name='login_user'),
    path('logout/', logout_user, name='logout_user'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    path('user/', get_logged_in_user, name='get-logged-in-user'),
    path('users/', list_all_users, name='list_all_users'),  # admin only
]
