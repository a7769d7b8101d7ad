from django.apps import AppConfig


class GrowthappConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'growthApp'
    verbose_name = 'Growth Updates'
