from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static


urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('userApp.urls')),
    path('farmers/', include('farmerApp.urls')),
    path('lands/', include('landApp.urls')),
    path('orders/', include('orderApp.urls')),
    path('growth/', include('growthApp.urls')),
    path('notifications/', include('notificationApp.urls')),
    path('assistant/', include('assistantApp.urls')),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
