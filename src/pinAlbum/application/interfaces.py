from abc import ABC, abstractmethod
from typing import List

from pinAlbum.domain.models import SearchCandidate

class ISearchClient(ABC):
    """Interface for the photo search API."""

    @abstractmethod
    def search(self, latitude: float, longitude: float) -> List[SearchCandidate]:
        """
        Search photos near a coordinate.
        Returns deduplicated candidates sorted ascending by URL; an empty list
        means the search succeeded but found nothing.
        Raises SearchError on transport or decode failure.
        """
        pass

class IAssetFetcher(ABC):
    """Interface for downloading raw bytes."""

    @abstractmethod
    def fetch(self, url: str) -> bytes:
        """Return the body at *url* or raise FetchError. No retries."""
        pass

class ILocationNamer(ABC):
    """Interface for turning coordinates into a display name."""

    @abstractmethod
    def display_name(self, latitude: float, longitude: float) -> str:
        """Return a human readable name, never raising; falls back to "Unknown"."""
        pass
