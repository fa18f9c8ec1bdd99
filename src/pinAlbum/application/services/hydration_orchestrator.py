"""Search, populate and resumably download the photos of one album."""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Dict

from pinAlbum.application.interfaces import IAssetFetcher, ISearchClient
from pinAlbum.domain.models import Album, HydrationState, SortOrder
from pinAlbum.errors import (
    BadDownloadError,
    ConcurrentModificationError,
    SearchError,
    StaleGenerationError,
)
from pinAlbum.events import EventBus, HydrationProgressEvent, HydrationStateChangedEvent
from pinAlbum.infrastructure.store import AlbumStore

LOGGER = logging.getLogger(__name__)


class HydrationOutcome(str, Enum):
    COMPLETE = "complete"
    NO_RESULTS = "no_results"
    # A newer search generation started while this pipeline was running
    SUPERSEDED = "superseded"


class HydrationOrchestrator:
    """Per-album pipeline ``Idle → Searching → Populating → Downloading → Complete``.

    Downloads are strictly sequential in descending ``source_url`` order, the
    same order the album is displayed in.  Progress already written is never
    rolled back: an interrupted run is continued by
    :meth:`resume_photo_download`, which skips every item that already has a
    payload.
    """

    def __init__(
        self,
        store: AlbumStore,
        search_client: ISearchClient,
        fetcher: IAssetFetcher,
        event_bus: EventBus,
    ) -> None:
        self._store = store
        self._search = search_client
        self._fetcher = fetcher
        self._events = event_bus
        self._states: Dict[str, HydrationState] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    def state_of(self, album_id: str) -> HydrationState:
        with self._lock:
            return self._states.get(album_id, HydrationState.IDLE)

    @staticmethod
    def needs_resume(album: Album) -> bool:
        return album.needs_resume

    def _transition(self, album_id: str, state: HydrationState) -> None:
        with self._lock:
            previous = self._states.get(album_id, HydrationState.IDLE)
            self._states[album_id] = state
        if previous is not state:
            LOGGER.debug("Album %s: %s -> %s", album_id, previous.value, state.value)
            self._events.publish(HydrationStateChangedEvent(album_id=album_id, state=state))

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------
    def hydrate(self, album_id: str) -> HydrationOutcome:
        """Run a fresh search for the album and download every result.

        Raises
        ------
        StoreWriteFailedError
            When the flags cannot be reset; nothing else runs.
        BadDownloadError
            When the search fails. Flags stay ``False`` so a reload can retry.
        FetchError, StoreError
            When a download or write aborts the download loop.
        """

        location = self._store.location_for_album(album_id)

        generation = self._store.start_generation(album_id)
        self._transition(album_id, HydrationState.SEARCHING)

        try:
            candidates = self._search.search(location.latitude, location.longitude)
        except SearchError as exc:
            self._transition(album_id, HydrationState.IDLE)
            raise BadDownloadError(
                f"Photo search failed for ({location.latitude}, {location.longitude}): {exc}"
            ) from exc

        if not candidates:
            if not self._store.mark_album_flags(album_id, True, True, generation=generation):
                LOGGER.info("Album %s was reloaded during an empty search", album_id)
                return HydrationOutcome.SUPERSEDED
            self._transition(album_id, HydrationState.COMPLETE)
            LOGGER.info("No photos found for album %s", album_id)
            return HydrationOutcome.NO_RESULTS

        self._transition(album_id, HydrationState.POPULATING)
        try:
            self._store.replace_photo_items(album_id, candidates, generation=generation)
        except StaleGenerationError:
            LOGGER.info("Album %s was reloaded while searching; dropping results", album_id)
            return HydrationOutcome.SUPERSEDED
        except Exception:
            self._transition(album_id, HydrationState.IDLE)
            raise
        return self.resume_photo_download(album_id, generation=generation)

    def resume_photo_download(self, album_id: str, generation: int | None = None) -> HydrationOutcome:
        """Download every missing payload, then mark the album complete.

        Safe to call repeatedly: items with a payload are skipped, and an album
        that is already complete is left untouched.  An album whose first
        search failed holds no items and is searched again instead, so a
        failed search never ends up marked complete.
        """

        album = self._store.require_album(album_id)
        if album.no_results_found:
            self._transition(album_id, HydrationState.COMPLETE)
            return HydrationOutcome.NO_RESULTS
        if album.download_complete:
            self._transition(album_id, HydrationState.COMPLETE)
            return HydrationOutcome.COMPLETE

        items = self._store.photo_items(album_id, SortOrder.DESC)
        if generation is None:
            if not items:
                LOGGER.info("Album %s was never populated; searching again", album_id)
                return self.hydrate(album_id)
            generation = album.generation

        self._transition(album_id, HydrationState.DOWNLOADING)
        self._publish_progress(album_id)

        try:
            for item in items:
                if item.is_hydrated:
                    continue
                if self._store.require_album(album_id).generation != generation:
                    LOGGER.info("Album %s was reloaded; stopping stale download", album_id)
                    return HydrationOutcome.SUPERSEDED
                if not self._store.item_exists(item.id):
                    LOGGER.debug("Skipping deleted item %s", item.id)
                    continue
                payload = self._fetcher.fetch(item.source_url)
                try:
                    self._store.set_payload(item.id, payload)
                except ConcurrentModificationError:
                    LOGGER.debug("Item %s was deleted while downloading", item.id)
                    continue
                self._publish_progress(album_id)
        except Exception as exc:
            LOGGER.warning("Download of album %s stopped: %s", album_id, exc)
            self._transition(album_id, HydrationState.IDLE)
            raise

        if not self._store.mark_album_flags(album_id, True, False, generation=generation):
            LOGGER.info("Album %s moved to a newer generation; leaving flags alone", album_id)
            return HydrationOutcome.SUPERSEDED

        self._transition(album_id, HydrationState.COMPLETE)
        LOGGER.info("Album %s fully downloaded (%d items)", album_id, len(items))
        return HydrationOutcome.COMPLETE

    def _publish_progress(self, album_id: str) -> None:
        progress = self._store.progress(album_id)
        self._events.publish(HydrationProgressEvent(
            album_id=album_id,
            downloaded=progress.downloaded,
            total=progress.total,
        ))
