"""Read-side context that mirrors one album for a UI-like consumer."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Callable, Dict, List, Optional, Sequence

from pinAlbum.domain.models import Album, AlbumProgress, MergePolicy, PhotoItem, SortOrder
from pinAlbum.events import (
    AlbumEvent,
    AlbumFlagsChangedEvent,
    EventBus,
    PhotoItemsDeletedEvent,
    PhotoItemsInsertedEvent,
    PhotoItemUpdatedEvent,
)

from .album_store import AlbumStore
from .merge import merge_item

LOGGER = logging.getLogger(__name__)


class AlbumViewContext:
    """In-memory, sorted view of an album kept current from store events.

    The context never writes to the store directly.  Deletes are requested
    through :meth:`request_delete`, which records the reader's intent for the
    affected ids, hides them at once and enqueues the delete on the store's
    writer path.  Store notifications are merged with :func:`merge_item`
    according to that intent.
    """

    def __init__(self, store: AlbumStore, event_bus: EventBus, album_id: str) -> None:
        self._store = store
        self._bus = event_bus
        self.album_id = album_id
        self._lock = threading.RLock()
        self._items: Dict[str, PhotoItem] = {}
        self._pending: Dict[str, MergePolicy] = {}
        self._album: Optional[Album] = None
        self._listeners: List[Callable[[AlbumEvent], None]] = []
        self._subscription = event_bus.subscribe(AlbumEvent, self._on_event)
        self.refresh()

    # ------------------------------------------------------------------
    # Snapshot access
    # ------------------------------------------------------------------
    def refresh(self) -> None:
        album = self._store.require_album(self.album_id)
        items = self._store.photo_items(self.album_id, SortOrder.DESC)
        with self._lock:
            self._album = album
            self._items = {item.id: item for item in items}
            self._pending = {
                item_id: policy for item_id, policy in self._pending.items() if item_id in self._items
            }

    @property
    def album(self) -> Album:
        with self._lock:
            return self._album

    @property
    def items(self) -> List[PhotoItem]:
        """Visible items in display order (descending source URL)."""
        with self._lock:
            visible = [item for item_id, item in self._items.items() if item_id not in self._pending]
        return sorted(visible, key=lambda item: item.source_url, reverse=True)

    def item_ids(self) -> List[str]:
        return [item.id for item in self.items]

    def held_item(self, item_id: str) -> Optional[PhotoItem]:
        """Return the reader's copy of *item_id*, including hidden pending rows."""
        with self._lock:
            return self._items.get(item_id)

    def progress(self) -> AlbumProgress:
        items = self.items
        return AlbumProgress(total=len(items), downloaded=sum(1 for item in items if item.is_hydrated))

    def add_listener(self, callback: Callable[[AlbumEvent], None]) -> None:
        self._listeners.append(callback)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def request_delete(
        self,
        ids: Sequence[str],
        merge_policy: MergePolicy = MergePolicy.STORE_TRUMP,
    ) -> "Future[int]":
        ids = list(ids)
        with self._lock:
            for item_id in ids:
                self._pending[item_id] = merge_policy
        future = self._store.perform_background_task(
            lambda session: session.delete_items(ids), merge_policy
        )
        future.add_done_callback(lambda f: self._on_delete_done(f, ids, merge_policy))
        return future

    def discard_all(self) -> List[str]:
        """Mark every held row as about to be discarded by a reload."""
        with self._lock:
            ids = list(self._items)
            for item_id in ids:
                self._pending[item_id] = MergePolicy.OBJECT_TRUMP
        return ids

    def close(self) -> None:
        self._bus.unsubscribe(self._subscription)

    # ------------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------------
    def _on_delete_done(self, future: Future, ids: List[str], merge_policy: MergePolicy) -> None:
        if future.exception() is None:
            return
        LOGGER.warning("Delete of %d items in album %s failed: %s", len(ids), self.album_id, future.exception())
        with self._lock:
            for item_id in ids:
                self._pending.pop(item_id, None)
        if merge_policy is MergePolicy.OBJECT_TRUMP:
            # Rows held back under reader intent may be stale; reload them
            self.refresh()

    def _on_event(self, event: AlbumEvent) -> None:
        if event.album_id != self.album_id:
            return
        with self._lock:
            if isinstance(event, PhotoItemsInsertedEvent):
                for item in event.items:
                    self._items.setdefault(item.id, item)
            elif isinstance(event, PhotoItemUpdatedEvent) and event.item is not None:
                item_id = event.item.id
                merged = merge_item(self._items.get(item_id), event.item, self._pending.get(item_id))
                if merged is not None:
                    self._items[item_id] = merged
            elif isinstance(event, PhotoItemsDeletedEvent):
                for item_id in event.item_ids:
                    self._items.pop(item_id, None)
                    self._pending.pop(item_id, None)
            elif isinstance(event, AlbumFlagsChangedEvent) and self._album is not None:
                self._album.download_complete = event.download_complete
                self._album.no_results_found = event.no_results_found
                self._album.generation = event.generation
        for listener in list(self._listeners):
            listener(event)
