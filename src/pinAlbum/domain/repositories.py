from abc import ABC, abstractmethod
from typing import List, Optional, Sequence
from .models import Album, Location, PhotoItem
from .models.query import PhotoItemQuery

class ILocationRepository(ABC):
    @abstractmethod
    def get(self, id: str) -> Optional[Location]:
        pass

    @abstractmethod
    def list_all(self) -> List[Location]:
        pass

    @abstractmethod
    def save(self, location: Location) -> None:
        pass

    @abstractmethod
    def rename(self, id: str, display_name: str) -> bool:
        """Update the display name; False when the location is gone."""
        pass

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Delete a location together with its album and photo items."""
        pass

class IAlbumRepository(ABC):
    @abstractmethod
    def get(self, id: str) -> Optional[Album]:
        pass

    @abstractmethod
    def get_by_location(self, location_id: str) -> Optional[Album]:
        pass

    @abstractmethod
    def save(self, album: Album) -> None:
        pass

    @abstractmethod
    def update_flags(
        self,
        id: str,
        download_complete: bool,
        no_results_found: bool,
        expected_generation: Optional[int] = None,
    ) -> bool:
        """Write both flags, returning whether the row changed.

        Completion is only written when every item has a payload (or, for
        ``no_results_found``, when the album has no items at all).
        """
        pass

class IPhotoItemRepository(ABC):
    @abstractmethod
    def get(self, id: str) -> Optional[PhotoItem]:
        """Find single photo item by ID"""
        pass

    @abstractmethod
    def exists(self, id: str) -> bool:
        pass

    @abstractmethod
    def find_by_query(self, query: PhotoItemQuery) -> List[PhotoItem]:
        """Find photo items by query object"""
        pass

    @abstractmethod
    def count(self, query: PhotoItemQuery) -> int:
        """Count photo items matching query"""
        pass

    @abstractmethod
    def save_batch(self, items: Sequence[PhotoItem]) -> None:
        """Insert photo items"""
        pass

    @abstractmethod
    def update_payload(self, id: str, payload: bytes) -> bool:
        """Store payload bytes; False when the row no longer exists."""
        pass

    @abstractmethod
    def delete_many(self, ids: Sequence[str]) -> List[PhotoItem]:
        """Delete by ID, returning the rows that actually existed."""
        pass
