"""Persisted Location → Album → PhotoItem graph with a single writer path."""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections import defaultdict
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import contextmanager
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, TypeVar

from pinAlbum.domain.models import (
    Album,
    AlbumProgress,
    Location,
    MergePolicy,
    PhotoItem,
    PhotoItemQuery,
    SearchCandidate,
    SortOrder,
)
from pinAlbum.errors import (
    AlbumNotEmptyError,
    AlbumNotFoundError,
    ConcurrentModificationError,
    LocationNotFoundError,
    StaleGenerationError,
    StoreUnavailableError,
    StoreWriteFailedError,
)
from pinAlbum.events import (
    AlbumFlagsChangedEvent,
    EventBus,
    LocationCreatedEvent,
    LocationDeletedEvent,
    LocationRenamedEvent,
    PhotoItemsDeletedEvent,
    PhotoItemsInsertedEvent,
    PhotoItemUpdatedEvent,
)
from pinAlbum.infrastructure.db.pool import ConnectionPool
from pinAlbum.infrastructure.repositories.sqlite_album_repository import SQLiteAlbumRepository
from pinAlbum.infrastructure.repositories.sqlite_location_repository import SQLiteLocationRepository
from pinAlbum.infrastructure.repositories.sqlite_photo_item_repository import SQLitePhotoItemRepository

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class WriteSession:
    """Writable handle bound to the writer connection for one transaction.

    Mutations queue their change events on the session; the store publishes
    them only after the enclosing transaction has committed, so subscribers
    never observe a change that could still be rolled back.
    """

    def __init__(self, store: "AlbumStore", merge_policy: MergePolicy) -> None:
        self._store = store
        self.merge_policy = merge_policy
        self._pending_events: List[object] = []

    # ------------------------------------------------------------------
    # Locations
    # ------------------------------------------------------------------
    def create_location_and_album(self, latitude: float, longitude: float, name: Optional[str] = None) -> Location:
        location = Location.create(latitude, longitude, name)
        album = Album.create(location.id)
        self._store._locations.save(location)
        self._store._albums.save(album)
        location.album_id = album.id
        self._emit(LocationCreatedEvent(
            location_id=location.id,
            album_id=album.id,
            latitude=location.latitude,
            longitude=location.longitude,
        ))
        return location

    def rename_location(self, location_id: str, display_name: str) -> None:
        if not self._store._locations.rename(location_id, display_name):
            raise LocationNotFoundError(location_id)
        self._emit(LocationRenamedEvent(location_id=location_id, display_name=display_name))

    def delete_location(self, location_id: str) -> bool:
        location = self._store._locations.get(location_id)
        if location is None:
            return False
        self._store._locations.delete(location_id)
        self._emit(LocationDeletedEvent(location_id=location_id, album_id=location.album_id or ""))
        return True

    # ------------------------------------------------------------------
    # Albums
    # ------------------------------------------------------------------
    def mark_album_flags(
        self,
        album_id: str,
        download_complete: bool,
        no_results_found: bool,
        generation: Optional[int] = None,
    ) -> bool:
        self._store.require_album(album_id)
        changed = self._store._albums.update_flags(
            album_id, download_complete, no_results_found, expected_generation=generation
        )
        if not changed:
            return False
        album = self._store._albums.get(album_id)
        self._emit(AlbumFlagsChangedEvent(
            album_id=album_id,
            merge_policy=self.merge_policy,
            download_complete=album.download_complete,
            no_results_found=album.no_results_found,
            generation=album.generation,
        ))
        return True

    def start_generation(self, album_id: str) -> int:
        """Reset both flags and return the album's new search generation."""
        self.mark_album_flags(album_id, False, False)
        return self._store.require_album(album_id).generation

    def clear_album(self, album_id: str) -> int:
        """Delete every item of the album and fence off running pipelines."""
        ids = [item.id for item in self._store.photo_items(album_id)]
        deleted = self.delete_items(ids)
        self.start_generation(album_id)
        return deleted

    # ------------------------------------------------------------------
    # Photo items
    # ------------------------------------------------------------------
    def replace_photo_items(
        self,
        album_id: str,
        candidates: Iterable[SearchCandidate],
        generation: Optional[int] = None,
    ) -> List[PhotoItem]:
        album = self._store.require_album(album_id)
        if generation is not None and album.generation != generation:
            raise StaleGenerationError(
                f"Album {album_id} is at generation {album.generation}, not {generation}"
            )
        before = self._store.count_items(album_id)
        if before:
            raise AlbumNotEmptyError(f"Album {album_id} still holds {before} photo items")
        items = [PhotoItem.create(album_id, candidate) for candidate in candidates]
        if not items:
            return []
        self._store._items.save_batch(items)
        self._emit(PhotoItemsInsertedEvent(
            album_id=album_id,
            merge_policy=self.merge_policy,
            items=tuple(items),
            count_before=before,
            count_after=self._store.count_items(album_id),
        ))
        return items

    def set_payload(self, item_id: str, payload: bytes) -> PhotoItem:
        item = self._store._items.get(item_id)
        if item is None or not self._store._items.update_payload(item_id, payload):
            raise ConcurrentModificationError(f"Photo item {item_id} no longer exists")
        item.payload = payload
        self._emit(PhotoItemUpdatedEvent(
            album_id=item.album_id,
            merge_policy=self.merge_policy,
            item=item,
        ))
        return item

    def delete_items(self, ids: Sequence[str]) -> int:
        ids = list(dict.fromkeys(ids))
        if not ids:
            return 0
        deleted = self._store._items.delete_many(ids)
        grouped: Dict[str, List[str]] = defaultdict(list)
        for item in deleted:
            grouped[item.album_id].append(item.id)
        for album_id, item_ids in grouped.items():
            remaining = self._store.count_items(album_id)
            self._emit(PhotoItemsDeletedEvent(
                album_id=album_id,
                merge_policy=self.merge_policy,
                item_ids=tuple(item_ids),
                count_before=remaining + len(item_ids),
                count_after=remaining,
            ))
        return len(deleted)

    # ------------------------------------------------------------------
    def _emit(self, event: object) -> None:
        self._pending_events.append(event)

    def _drain(self) -> List[object]:
        events, self._pending_events = self._pending_events, []
        return events


class AlbumStore:
    """Owner of the persisted entity graph.

    Writes are funnelled through :class:`WriteSession` objects bound to the
    pool's writer connection; reads use the reader pool.  Every committed
    mutation is announced on the :class:`EventBus`.
    """

    def __init__(self, pool: ConnectionPool, event_bus: EventBus, background_workers: int = 2) -> None:
        self._pool = pool
        self._events = event_bus
        self._local = threading.local()
        try:
            pool.open()
            # Order matters: albums and photo_items reference the tables before them
            self._locations = SQLiteLocationRepository(pool)
            self._albums = SQLiteAlbumRepository(pool)
            self._items = SQLitePhotoItemRepository(pool)
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"Cannot initialise album store: {exc}") from exc
        self._executor = ThreadPoolExecutor(
            max_workers=background_workers, thread_name_prefix="album-store"
        )

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------
    @contextmanager
    def session(self, merge_policy: MergePolicy = MergePolicy.STORE_TRUMP) -> Iterator[WriteSession]:
        """Open (or join) a write transaction on the calling thread."""

        active: Optional[WriteSession] = getattr(self._local, "session", None)
        if active is not None:
            yield active
            return

        session = WriteSession(self, merge_policy)
        self._local.session = session
        try:
            with self._pool.writer():
                yield session
        except sqlite3.Error as exc:
            session._drain()
            raise StoreWriteFailedError(str(exc)) from exc
        except Exception:
            session._drain()
            raise
        finally:
            self._local.session = None

        for event in session._drain():
            self._events.publish(event)

    def perform_background_task(
        self,
        task: Callable[[WriteSession], T],
        merge_policy: MergePolicy = MergePolicy.STORE_TRUMP,
    ) -> "Future[T]":
        """Run *task* with a writable session on a background thread."""

        def _run() -> T:
            with self.session(merge_policy) as session:
                return task(session)

        return self._executor.submit(_run)

    def create_location_and_album(self, latitude: float, longitude: float, name: Optional[str] = None) -> Location:
        with self.session() as session:
            location = session.create_location_and_album(latitude, longitude, name)
        LOGGER.info("Created location %s (%.4f, %.4f) with album %s",
                    location.id, location.latitude, location.longitude, location.album_id)
        return location

    def rename_location(self, location_id: str, display_name: str) -> None:
        with self.session() as session:
            session.rename_location(location_id, display_name)

    def delete_location(self, location_id: str) -> bool:
        with self.session() as session:
            return session.delete_location(location_id)

    def replace_photo_items(
        self,
        album_id: str,
        candidates: Iterable[SearchCandidate],
        *,
        generation: Optional[int] = None,
    ) -> List[PhotoItem]:
        with self.session() as session:
            items = session.replace_photo_items(album_id, candidates, generation)
        LOGGER.info("Inserted %d photo items into album %s", len(items), album_id)
        return items

    def mark_album_flags(
        self,
        album_id: str,
        download_complete: bool,
        no_results_found: bool,
        *,
        generation: Optional[int] = None,
    ) -> bool:
        with self.session() as session:
            return session.mark_album_flags(album_id, download_complete, no_results_found, generation)

    def start_generation(self, album_id: str) -> int:
        with self.session() as session:
            return session.start_generation(album_id)

    def clear_album(self, album_id: str, merge_policy: MergePolicy = MergePolicy.OBJECT_TRUMP) -> int:
        """Delete all of an album's items and start a new generation in one transaction.

        Pipelines still holding the previous generation can no longer insert
        items or mark the album complete once this commits.
        """
        with self.session(merge_policy) as session:
            deleted = session.clear_album(album_id)
        LOGGER.info("Cleared album %s (%d items)", album_id, deleted)
        return deleted

    def set_payload(self, item_id: str, payload: bytes) -> PhotoItem:
        with self.session() as session:
            return session.set_payload(item_id, payload)

    def delete_items(self, ids: Sequence[str], merge_policy: MergePolicy = MergePolicy.STORE_TRUMP) -> int:
        with self.session(merge_policy) as session:
            count = session.delete_items(ids)
        LOGGER.info("Deleted %d photo items (%s)", count, merge_policy.value)
        return count

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------
    def get_location(self, location_id: str) -> Optional[Location]:
        return self._locations.get(location_id)

    def list_locations(self) -> List[Location]:
        return self._locations.list_all()

    def get_album(self, album_id: str) -> Optional[Album]:
        return self._albums.get(album_id)

    def require_album(self, album_id: str) -> Album:
        album = self._albums.get(album_id)
        if album is None:
            raise AlbumNotFoundError(album_id)
        return album

    def get_album_for_location(self, location_id: str) -> Optional[Album]:
        return self._albums.get_by_location(location_id)

    def location_for_album(self, album_id: str) -> Location:
        album = self.require_album(album_id)
        location = self._locations.get(album.location_id)
        if location is None:
            raise LocationNotFoundError(album.location_id)
        return location

    def photo_items(self, album_id: str, order: SortOrder = SortOrder.DESC) -> List[PhotoItem]:
        return self._items.find_by_query(PhotoItemQuery().with_album_id(album_id).sorted(order))

    def find_items(self, query: PhotoItemQuery) -> List[PhotoItem]:
        return self._items.find_by_query(query)

    def get_item(self, item_id: str) -> Optional[PhotoItem]:
        return self._items.get(item_id)

    def item_exists(self, item_id: str) -> bool:
        return self._items.exists(item_id)

    def count_items(self, album_id: str) -> int:
        return self._items.count(PhotoItemQuery().with_album_id(album_id))

    def count_missing_payloads(self, album_id: str) -> int:
        return self._items.count(PhotoItemQuery().with_album_id(album_id).only_missing_payload())

    def progress(self, album_id: str) -> AlbumProgress:
        total = self.count_items(album_id)
        return AlbumProgress(total=total, downloaded=total - self.count_missing_payloads(album_id))

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        self._pool.close_all()
