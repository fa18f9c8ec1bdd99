import logging
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Optional

from .base import UseCase, UseCaseRequest, UseCaseResponse
from pinAlbum.application.interfaces import ILocationNamer
from pinAlbum.application.services.hydration_orchestrator import HydrationOrchestrator
from pinAlbum.application.services.hydration_scheduler import GEOCODE, HYDRATE, HydrationScheduler
from pinAlbum.config import UNKNOWN_LOCATION_NAME
from pinAlbum.domain.models import Location
from pinAlbum.errors import LocationNotFoundError
from pinAlbum.infrastructure.store import AlbumStore

@dataclass(frozen=True)
class DropPinRequest(UseCaseRequest):
    latitude: float = 0.0
    longitude: float = 0.0

@dataclass(frozen=True)
class DropPinResponse(UseCaseResponse):
    location_id: str = ""
    album_id: str = ""
    hydration: Optional[Future] = None

class DropPinUseCase(UseCase):
    """Create the pin's location and album, then start the first download."""

    def __init__(
        self,
        store: AlbumStore,
        orchestrator: HydrationOrchestrator,
        scheduler: HydrationScheduler,
        namer: ILocationNamer,
    ):
        self._store = store
        self._orchestrator = orchestrator
        self._scheduler = scheduler
        self._namer = namer
        self._logger = logging.getLogger(__name__)

    def execute(self, request: DropPinRequest) -> DropPinResponse:
        if not (-90.0 <= request.latitude <= 90.0 and -180.0 <= request.longitude <= 180.0):
            return DropPinResponse.failed(
                f"Coordinates out of range: ({request.latitude}, {request.longitude})"
            )

        # Location and album exist before any network call is made
        location = self._store.create_location_and_album(request.latitude, request.longitude)
        album_id = location.album_id

        self._scheduler.submit(album_id, GEOCODE, self._resolve_name, location)
        hydration = self._scheduler.submit(album_id, HYDRATE, self._orchestrator.hydrate, album_id)

        self._logger.info(f"Dropped pin {location.id} at ({location.latitude}, {location.longitude})")
        return DropPinResponse(location_id=location.id, album_id=album_id, hydration=hydration)

    def _resolve_name(self, location: Location) -> str:
        name = self._namer.display_name(location.latitude, location.longitude)
        if name == UNKNOWN_LOCATION_NAME:
            return name
        try:
            self._store.rename_location(location.id, name)
        except LocationNotFoundError:
            # Pin removed before the name came back
            self._logger.debug(f"Location {location.id} gone before rename")
        return name
