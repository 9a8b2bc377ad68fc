from django.apps import AppConfig


class ReportsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.reports'
    label = 'reports'
    verbose_name = 'Reports & Moderation'

    def ready(self):
        from . import signals  # noqa: F401
