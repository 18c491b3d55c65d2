from django.apps import AppConfig


class CoreConfig(AppConfig):
    name = "core"
    default_auto_field = "django.db.models.BigAutoField"
    verbose_name = "FitCheck"

    def ready(self):
        """Import signal handlers and bring up push delivery."""
        import core.signals  # noqa
        from core.services.fcm_service import FCMService

        FCMService.initialize()
