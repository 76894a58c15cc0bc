from django.apps import AppConfig


class PlanPurchasesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.plan_purchases'
    verbose_name = 'Plan purchases'
