import logging
from typing import List, Sequence

from pinAlbum.application.use_cases import (
    DeletePhotosRequest, DeletePhotosResponse, DeletePhotosUseCase,
    DeletePinRequest, DeletePinResponse, DeletePinUseCase,
    DropPinRequest, DropPinResponse, DropPinUseCase,
    OpenAlbumRequest, OpenAlbumResponse, OpenAlbumUseCase,
    ReloadAlbumRequest, ReloadAlbumResponse, ReloadAlbumUseCase,
)
from pinAlbum.domain.models import Location
from pinAlbum.infrastructure.store import AlbumStore

class PinService:
    """
    Application Service Facade for pin and album operations.
    Delegates to specific Use Cases.
    """
    def __init__(
        self,
        store: AlbumStore,
        drop_pin_use_case: DropPinUseCase,
        open_album_use_case: OpenAlbumUseCase,
        delete_photos_use_case: DeletePhotosUseCase,
        reload_album_use_case: ReloadAlbumUseCase,
        delete_pin_use_case: DeletePinUseCase,
    ):
        self._store = store
        self._drop_pin_uc = drop_pin_use_case
        self._open_album_uc = open_album_use_case
        self._delete_photos_uc = delete_photos_use_case
        self._reload_album_uc = reload_album_use_case
        self._delete_pin_uc = delete_pin_use_case
        self._logger = logging.getLogger(__name__)

    def list_pins(self) -> List[Location]:
        return self._store.list_locations()

    def drop_pin(self, latitude: float, longitude: float) -> DropPinResponse:
        request = DropPinRequest(latitude=latitude, longitude=longitude)
        return self._drop_pin_uc.execute(request)

    def open_album(self, location_id: str) -> OpenAlbumResponse:
        request = OpenAlbumRequest(location_id=location_id)
        return self._open_album_uc.execute(request)

    def delete_photos(self, album_id: str, item_ids: Sequence[str]) -> DeletePhotosResponse:
        request = DeletePhotosRequest(album_id=album_id, item_ids=tuple(item_ids))
        return self._delete_photos_uc.execute(request)

    def reload_album(self, album_id: str) -> ReloadAlbumResponse:
        request = ReloadAlbumRequest(album_id=album_id)
        return self._reload_album_uc.execute(request)

    def delete_pin(self, location_id: str) -> DeletePinResponse:
        request = DeletePinRequest(location_id=location_id)
        return self._delete_pin_uc.execute(request)
