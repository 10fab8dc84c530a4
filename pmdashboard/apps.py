from django.apps import AppConfig


class PmDashboardConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "pmdashboard"
    verbose_name = "PM Dashboard"
