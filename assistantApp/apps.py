from django.apps import AppConfig


class AssistantappConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'assistantApp'
    verbose_name = 'AI Assistant'
