from django.apps import AppConfig


class EcardsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.ecards'
    verbose_name = 'E-Cards'
