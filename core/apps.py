from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Shared plumbing: errors, repositories, services and permissions."""

    name = "core"
    verbose_name = "Core"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        from core.config import validate_config_on_startup

        validate_config_on_startup()
