from .bus import Event, EventBus, Subscription
from .domain_events import DomainEvent
from .album_events import (
    AlbumEvent,
    AlbumFlagsChangedEvent,
    AlbumReloadStartedEvent,
    HydrationProgressEvent,
    HydrationStateChangedEvent,
    LocationCreatedEvent,
    LocationDeletedEvent,
    LocationRenamedEvent,
    PhotoItemsDeletedEvent,
    PhotoItemsInsertedEvent,
    PhotoItemUpdatedEvent,
)

__all__ = [
    "AlbumEvent",
    "AlbumFlagsChangedEvent",
    "AlbumReloadStartedEvent",
    "DomainEvent",
    "Event",
    "EventBus",
    "HydrationProgressEvent",
    "HydrationStateChangedEvent",
    "LocationCreatedEvent",
    "LocationDeletedEvent",
    "LocationRenamedEvent",
    "PhotoItemsDeletedEvent",
    "PhotoItemsInsertedEvent",
    "PhotoItemUpdatedEvent",
    "Subscription",
]
