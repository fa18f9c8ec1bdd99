"""Application-wide context wiring settings, storage and pipelines."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from .di.bootstrap import bootstrap
from .di.container import Container
from .utils.logging import configure_logging

if TYPE_CHECKING:  # pragma: no cover - only for type checking
    from .application.services.pin_service import PinService
    from .infrastructure.store import AlbumStore
    from .settings.manager import SettingsManager


def _create_settings_manager(path: Optional[Path] = None) -> "SettingsManager":
    from .settings.manager import SettingsManager

    manager = SettingsManager(path)
    manager.load()
    return manager


def _create_di_container(settings: "SettingsManager") -> Container:
    container = Container()
    container.register_instance(type(settings), settings)
    bootstrap(container, settings, settings.database_path)
    return container


@dataclass
class AppContext:
    """Container object shared by the CLI and any embedding UI."""

    settings: "SettingsManager" = field(default_factory=_create_settings_manager)
    container: Container = field(init=False)

    def __post_init__(self) -> None:
        configure_logging(self.settings.log_level)
        self.container = _create_di_container(self.settings)
        self.settings.settingsChanged.connect(self._on_setting_changed)

    @property
    def store(self) -> "AlbumStore":
        # Store-open failures propagate as StoreUnavailableError
        from .infrastructure.store import AlbumStore

        return self.container.resolve(AlbumStore)

    @property
    def service(self) -> "PinService":
        from .application.services.pin_service import PinService

        return self.container.resolve(PinService)

    def resolve(self, interface):
        return self.container.resolve(interface)

    def close(self) -> None:
        """Drain background work and release the database."""

        from .application.services import HydrationScheduler
        from .events.bus import EventBus
        from .infrastructure.store import AlbumStore

        scheduler = self.container.resolved_instance(HydrationScheduler)
        if scheduler is not None:
            scheduler.shutdown(wait=True)
        store = self.container.resolved_instance(AlbumStore)
        if store is not None:
            store.close()
        bus = self.container.resolved_instance(EventBus)
        if bus is not None:
            bus.shutdown()

    def _on_setting_changed(self, key: str, value: object) -> None:
        if key == "logging.level" and isinstance(value, str):
            configure_logging(value)
            logging.getLogger(__name__).info("Log level changed to %s", value)


def create_app_context(settings_path: Optional[Path] = None) -> AppContext:
    return AppContext(settings=_create_settings_manager(settings_path))
