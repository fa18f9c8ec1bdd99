import logging
from dataclasses import dataclass

from .base import UseCase, UseCaseRequest, UseCaseResponse
from pinAlbum.infrastructure.store import AlbumStore

@dataclass(frozen=True)
class DeletePinRequest(UseCaseRequest):
    location_id: str = ""

@dataclass(frozen=True)
class DeletePinResponse(UseCaseResponse):
    location_id: str = ""

class DeletePinUseCase(UseCase):
    """Remove a pin; its album and photos cascade with it."""

    def __init__(self, store: AlbumStore):
        self._store = store
        self._logger = logging.getLogger(__name__)

    def execute(self, request: DeletePinRequest) -> DeletePinResponse:
        if not self._store.delete_location(request.location_id):
            return DeletePinResponse.failed(f"No pin with id {request.location_id}", location_id=request.location_id)
        self._logger.info(f"Deleted pin {request.location_id}")
        return DeletePinResponse(location_id=request.location_id)
