from .base import UseCase, UseCaseRequest, UseCaseResponse
from .delete_photos import DeletePhotosRequest, DeletePhotosResponse, DeletePhotosUseCase
from .delete_pin import DeletePinRequest, DeletePinResponse, DeletePinUseCase
from .drop_pin import DropPinRequest, DropPinResponse, DropPinUseCase
from .open_album import OpenAlbumRequest, OpenAlbumResponse, OpenAlbumUseCase
from .reload_album import ReloadAlbumRequest, ReloadAlbumResponse, ReloadAlbumUseCase

__all__ = [
    "DeletePhotosRequest", "DeletePhotosResponse", "DeletePhotosUseCase",
    "DeletePinRequest", "DeletePinResponse", "DeletePinUseCase",
    "DropPinRequest", "DropPinResponse", "DropPinUseCase",
    "OpenAlbumRequest", "OpenAlbumResponse", "OpenAlbumUseCase",
    "ReloadAlbumRequest", "ReloadAlbumResponse", "ReloadAlbumUseCase",
    "UseCase", "UseCaseRequest", "UseCaseResponse",
]
