from dataclasses import dataclass, field
from typing import Optional, Tuple

from pinAlbum.domain.models import HydrationState, MergePolicy, PhotoItem

from .domain_events import DomainEvent


@dataclass(frozen=True)
class LocationCreatedEvent(DomainEvent):
    location_id: str = ""
    album_id: str = ""
    latitude: float = 0.0
    longitude: float = 0.0


@dataclass(frozen=True)
class LocationRenamedEvent(DomainEvent):
    location_id: str = ""
    display_name: str = ""


@dataclass(frozen=True)
class LocationDeletedEvent(DomainEvent):
    location_id: str = ""
    album_id: str = ""


@dataclass(frozen=True)
class AlbumEvent(DomainEvent):
    """Base for everything that happens to one album's entity subgraph."""

    album_id: str = ""
    merge_policy: MergePolicy = MergePolicy.STORE_TRUMP


@dataclass(frozen=True)
class PhotoItemsInsertedEvent(AlbumEvent):
    items: Tuple[PhotoItem, ...] = field(default_factory=tuple)
    count_before: int = 0
    count_after: int = 0


@dataclass(frozen=True)
class PhotoItemUpdatedEvent(AlbumEvent):
    item: Optional[PhotoItem] = None


@dataclass(frozen=True)
class PhotoItemsDeletedEvent(AlbumEvent):
    item_ids: Tuple[str, ...] = field(default_factory=tuple)
    count_before: int = 0
    count_after: int = 0


@dataclass(frozen=True)
class AlbumFlagsChangedEvent(AlbumEvent):
    download_complete: bool = False
    no_results_found: bool = False
    generation: int = 0


@dataclass(frozen=True)
class AlbumReloadStartedEvent(AlbumEvent):
    """Emitted once the old items are gone and before the new search starts."""


@dataclass(frozen=True)
class HydrationStateChangedEvent(AlbumEvent):
    state: HydrationState = HydrationState.IDLE


@dataclass(frozen=True)
class HydrationProgressEvent(AlbumEvent):
    downloaded: int = 0
    total: int = 0
