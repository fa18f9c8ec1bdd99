from __future__ import annotations

import os
from pathlib import Path

from .container import Container
from .lifetime import Lifetime
from pinAlbum.application.interfaces import IAssetFetcher, ILocationNamer, ISearchClient
from pinAlbum.application.services import HydrationOrchestrator, HydrationScheduler, ReloadCoordinator
from pinAlbum.application.services.pin_service import PinService
from pinAlbum.application.use_cases import (
    DeletePhotosUseCase,
    DeletePinUseCase,
    DropPinUseCase,
    OpenAlbumUseCase,
    ReloadAlbumUseCase,
)
from pinAlbum.config import API_KEY_ENV_VAR, READER_POOL_SIZE
from pinAlbum.errors import SettingsValidationError
from pinAlbum.errors.handler import ErrorHandler
from pinAlbum.events.bus import EventBus
from pinAlbum.infrastructure.db.pool import ConnectionPool
from pinAlbum.infrastructure.services import FlickrSearchClient, HttpAssetFetcher, ReverseGeocoderNamer
from pinAlbum.infrastructure.store import AlbumStore
from pinAlbum.settings.schema import FlickrSettings, SettingsSource
from pinAlbum.utils.logging import get_logger


def resolve_api_key(settings: SettingsSource) -> str:
    """Environment wins over the settings file."""

    key = os.environ.get(API_KEY_ENV_VAR) or FlickrSettings.from_source(settings).api_key
    if not key:
        raise SettingsValidationError(
            f"No Flickr API key configured; set flickr.api_key or {API_KEY_ENV_VAR}"
        )
    return key


def _search_client(settings: SettingsSource) -> FlickrSearchClient:
    flickr = FlickrSettings.from_source(settings)
    return FlickrSearchClient(
        api_key=resolve_api_key(settings),
        endpoint=flickr.endpoint,
        image_host=flickr.image_host,
        max_results=flickr.max_results,
        timeout=flickr.timeout_sec,
    )


def bootstrap(container: Container, settings: SettingsSource, database_path: Path) -> None:
    """Register all application services in the DI container."""

    c = container
    singleton = Lifetime.SINGLETON

    c.register_factory(EventBus, lambda: EventBus(get_logger("events")), singleton)
    c.register_factory(
        ErrorHandler,
        lambda: ErrorHandler(get_logger("errors"), c.resolve(EventBus)),
        singleton,
    )

    # --- Persistence ---
    c.register_factory(
        ConnectionPool,
        lambda: ConnectionPool(Path(database_path), pool_size=READER_POOL_SIZE),
        singleton,
    )
    c.register_factory(
        AlbumStore,
        lambda: AlbumStore(c.resolve(ConnectionPool), c.resolve(EventBus)),
        singleton,
    )

    # --- Network ---
    c.register_factory(ISearchClient, lambda: _search_client(settings), singleton)
    c.register_factory(
        IAssetFetcher,
        lambda: HttpAssetFetcher(timeout=FlickrSettings.from_source(settings).timeout_sec),
        singleton,
    )
    c.register_singleton(ILocationNamer, ReverseGeocoderNamer)

    # --- Pipelines ---
    c.register_factory(
        HydrationOrchestrator,
        lambda: HydrationOrchestrator(
            c.resolve(AlbumStore), c.resolve(ISearchClient), c.resolve(IAssetFetcher), c.resolve(EventBus)
        ),
        singleton,
    )
    c.register_factory(
        ReloadCoordinator,
        lambda: ReloadCoordinator(c.resolve(AlbumStore), c.resolve(HydrationOrchestrator), c.resolve(EventBus)),
        singleton,
    )
    c.register_factory(
        HydrationScheduler,
        lambda: HydrationScheduler(
            c.resolve(ErrorHandler), max_workers=int(settings.get("workers.max_hydrations"))
        ),
        singleton,
    )

    # --- Use cases ---
    c.register_factory(
        DropPinUseCase,
        lambda: DropPinUseCase(
            c.resolve(AlbumStore),
            c.resolve(HydrationOrchestrator),
            c.resolve(HydrationScheduler),
            c.resolve(ILocationNamer),
        ),
    )
    c.register_factory(
        OpenAlbumUseCase,
        lambda: OpenAlbumUseCase(
            c.resolve(AlbumStore), c.resolve(HydrationOrchestrator), c.resolve(HydrationScheduler)
        ),
    )
    c.register_factory(DeletePhotosUseCase, lambda: DeletePhotosUseCase(c.resolve(AlbumStore)))
    c.register_factory(
        ReloadAlbumUseCase,
        lambda: ReloadAlbumUseCase(
            c.resolve(AlbumStore), c.resolve(ReloadCoordinator), c.resolve(HydrationScheduler)
        ),
    )
    c.register_factory(DeletePinUseCase, lambda: DeletePinUseCase(c.resolve(AlbumStore)))

    c.register_factory(
        PinService,
        lambda: PinService(
            c.resolve(AlbumStore),
            c.resolve(DropPinUseCase),
            c.resolve(OpenAlbumUseCase),
            c.resolve(DeletePhotosUseCase),
            c.resolve(ReloadAlbumUseCase),
            c.resolve(DeletePinUseCase),
        ),
        singleton,
    )
