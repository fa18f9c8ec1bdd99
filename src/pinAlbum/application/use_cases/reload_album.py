import logging
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Optional

from .base import UseCase, UseCaseRequest, UseCaseResponse
from pinAlbum.application.services.hydration_scheduler import RELOAD, HydrationScheduler
from pinAlbum.application.services.reload_coordinator import ReloadCoordinator
from pinAlbum.infrastructure.store import AlbumStore

@dataclass(frozen=True)
class ReloadAlbumRequest(UseCaseRequest):
    album_id: str = ""

@dataclass(frozen=True)
class ReloadAlbumResponse(UseCaseResponse):
    album_id: str = ""
    reload: Optional[Future] = None

class ReloadAlbumUseCase(UseCase):
    def __init__(self, store: AlbumStore, coordinator: ReloadCoordinator, scheduler: HydrationScheduler):
        self._store = store
        self._coordinator = coordinator
        self._scheduler = scheduler
        self._logger = logging.getLogger(__name__)

    def execute(self, request: ReloadAlbumRequest) -> ReloadAlbumResponse:
        if self._store.get_album(request.album_id) is None:
            return ReloadAlbumResponse.failed(f"No album with id {request.album_id}")

        future = self._scheduler.submit(
            request.album_id, RELOAD, self._coordinator.reload, request.album_id
        )
        self._logger.info(f"Reload of album {request.album_id} scheduled")
        return ReloadAlbumResponse(album_id=request.album_id, reload=future)
