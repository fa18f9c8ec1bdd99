import logging
from dataclasses import dataclass, field
from typing import Tuple

from .base import UseCase, UseCaseRequest, UseCaseResponse
from pinAlbum.domain.models import MergePolicy
from pinAlbum.errors import StoreWriteFailedError
from pinAlbum.infrastructure.store import AlbumStore

@dataclass(frozen=True)
class DeletePhotosRequest(UseCaseRequest):
    album_id: str = ""
    item_ids: Tuple[str, ...] = field(default_factory=tuple)

@dataclass(frozen=True)
class DeletePhotosResponse(UseCaseResponse):
    deleted_count: int = 0
    remaining_count: int = 0

class DeletePhotosUseCase(UseCase):
    """User-initiated trash of individual photos."""

    def __init__(self, store: AlbumStore):
        self._store = store
        self._logger = logging.getLogger(__name__)

    def execute(self, request: DeletePhotosRequest) -> DeletePhotosResponse:
        if self._store.get_album(request.album_id) is None:
            return DeletePhotosResponse.failed(f"No album with id {request.album_id}")

        owned = {item.id for item in self._store.photo_items(request.album_id)}
        ids = [item_id for item_id in request.item_ids if item_id in owned]
        try:
            deleted = self._store.delete_items(ids, merge_policy=MergePolicy.STORE_TRUMP)
        except StoreWriteFailedError as exc:
            return DeletePhotosResponse.failed(str(exc))

        return DeletePhotosResponse(
            deleted_count=deleted,
            remaining_count=self._store.count_items(request.album_id),
        )
