"""Django app configuration for tierlists app."""

from typing import TYPE_CHECKING, override

from django.apps import AppConfig

if TYPE_CHECKING:
    from server.apps.tierlists.infrastructure.context import StoreContext


class TierlistsConfig(AppConfig):
    """Configuration for tierlists app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.tierlists'
    verbose_name = 'Tierlists'

    stores: 'StoreContext'

    @override
    def ready(self) -> None:
        """Build the store context once the app registry is ready."""
        from server.apps.tierlists.infrastructure.context import (  # noqa: PLC0415
            build_store_context,
        )

        self.stores = build_store_context()
