from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
import uuid

from pinAlbum.config import UNKNOWN_LOCATION_NAME


class HydrationState(str, Enum):
    """Per-album pipeline state."""

    IDLE = "idle"
    SEARCHING = "searching"
    POPULATING = "populating"
    DOWNLOADING = "downloading"
    COMPLETE = "complete"


class MergePolicy(str, Enum):
    """How a committed store change is merged into a reader's in-memory state.

    ``STORE_TRUMP``: property-level values coming from the store replace whatever
    the reader holds for that object.

    ``OBJECT_TRUMP``: the reader's own pending intent for an object (a requested
    delete) wins over store notifications that arrive for it afterwards.
    """

    STORE_TRUMP = "store_trump"
    OBJECT_TRUMP = "object_trump"


@dataclass(frozen=True)
class SearchCandidate:
    url: str
    title: str


@dataclass
class PhotoItem:
    id: str
    album_id: str
    source_url: str
    title: str
    payload: Optional[bytes] = None

    @property
    def is_hydrated(self) -> bool:
        return self.payload is not None

    @classmethod
    def create(cls, album_id: str, candidate: SearchCandidate) -> PhotoItem:
        return cls(
            id=str(uuid.uuid4()),
            album_id=album_id,
            source_url=candidate.url,
            title=candidate.title,
        )


@dataclass
class Album:
    id: str
    location_id: str
    download_complete: bool = False
    no_results_found: bool = False
    # Bumped each time the flags are reset for a new search
    generation: int = 0

    @property
    def needs_resume(self) -> bool:
        """True when a previous download was interrupted before completing."""
        return not self.download_complete and not self.no_results_found

    @classmethod
    def create(cls, location_id: str) -> Album:
        return cls(id=str(uuid.uuid4()), location_id=location_id)


@dataclass
class Location:
    id: str
    latitude: float
    longitude: float
    display_name: str = UNKNOWN_LOCATION_NAME
    created_at: Optional[datetime] = None
    album_id: Optional[str] = None

    @classmethod
    def create(cls, latitude: float, longitude: float, display_name: Optional[str] = None) -> Location:
        return cls(
            id=str(uuid.uuid4()),
            latitude=float(latitude),
            longitude=float(longitude),
            display_name=display_name or UNKNOWN_LOCATION_NAME,
            created_at=datetime.now(),
        )


@dataclass
class AlbumProgress:
    """Download progress of an album as counted from the store."""

    total: int = 0
    downloaded: int = 0

    @property
    def fraction(self) -> float:
        if self.total == 0:
            return 1.0
        return self.downloaded / self.total

    @property
    def missing(self) -> int:
        return self.total - self.downloaded
