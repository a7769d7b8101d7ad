from django.apps import AppConfig


class LandappConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'landApp'
    verbose_name = 'Land Listings'
