import logging
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .base import UseCase, UseCaseRequest, UseCaseResponse
from pinAlbum.application.services.hydration_orchestrator import HydrationOrchestrator
from pinAlbum.application.services.hydration_scheduler import RESUME, HydrationScheduler
from pinAlbum.domain.models import AlbumProgress, PhotoItem, SortOrder
from pinAlbum.infrastructure.store import AlbumStore

@dataclass(frozen=True)
class OpenAlbumRequest(UseCaseRequest):
    location_id: str = ""

@dataclass(frozen=True)
class OpenAlbumResponse(UseCaseResponse):
    album_id: str = ""
    title: str = ""
    items: Tuple[PhotoItem, ...] = field(default_factory=tuple)
    download_complete: bool = False
    no_results_found: bool = False
    progress: AlbumProgress = field(default_factory=AlbumProgress)
    resumed: Optional[Future] = None

class OpenAlbumUseCase(UseCase):
    """Load a pin's album and pick up an interrupted download."""

    def __init__(
        self,
        store: AlbumStore,
        orchestrator: HydrationOrchestrator,
        scheduler: HydrationScheduler,
    ):
        self._store = store
        self._orchestrator = orchestrator
        self._scheduler = scheduler
        self._logger = logging.getLogger(__name__)

    def execute(self, request: OpenAlbumRequest) -> OpenAlbumResponse:
        location = self._store.get_location(request.location_id)
        if location is None:
            return OpenAlbumResponse.failed(f"No pin with id {request.location_id}")

        album = self._store.get_album_for_location(location.id)
        if album is None:
            return OpenAlbumResponse.failed(f"Pin {location.id} has no album")

        resumed = None
        if self._orchestrator.needs_resume(album):
            self._logger.info(f"Resuming download of album {album.id}")
            resumed = self._scheduler.submit(
                album.id, RESUME, self._orchestrator.resume_photo_download, album.id
            )

        return OpenAlbumResponse(
            album_id=album.id,
            title=location.display_name,
            items=tuple(self._store.photo_items(album.id, SortOrder.DESC)),
            download_complete=album.download_complete,
            no_results_found=album.no_results_found,
            progress=self._store.progress(album.id),
            resumed=resumed,
        )
