import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class LitrpgConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "litrpg"
    verbose_name = "LitRPG progression"

    registry = None

    def ready(self):
        # built once; a broken class tree stops startup with RegistryError
        from .engine import build_registry

        self.registry = build_registry()
        logger.info(
            "registry loaded: %d classes, %d abilities, %d monsters",
            len(self.registry.classes), len(self.registry.abilities), len(self.registry.monsters),
        )
