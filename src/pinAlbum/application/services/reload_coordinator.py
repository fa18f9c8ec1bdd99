import logging

from pinAlbum.domain.models import MergePolicy
from pinAlbum.events import AlbumReloadStartedEvent, EventBus
from pinAlbum.infrastructure.store import AlbumStore

from .hydration_orchestrator import HydrationOrchestrator, HydrationOutcome

LOGGER = logging.getLogger(__name__)


class ReloadCoordinator:
    """Replace an album's photos with the results of a fresh search.

    Deleting the old generation is a hard barrier: the new search only starts
    once the delete has committed, so the album never holds old and new items
    at the same time.  If the delete fails the old items stay in place.

    The delete also starts a new album generation in the same transaction, so
    a hydrate or resume still running for the album stops writing once the
    barrier has committed.
    """

    def __init__(self, store: AlbumStore, orchestrator: HydrationOrchestrator, event_bus: EventBus):
        self._store = store
        self._orchestrator = orchestrator
        self._events = event_bus

    def reload(self, album_id: str) -> HydrationOutcome:
        self._store.require_album(album_id)
        # The reader's pending discard wins over late hydration updates
        deleted = self._store.clear_album(album_id, merge_policy=MergePolicy.OBJECT_TRUMP)
        LOGGER.info("Reload of album %s removed %d items", album_id, deleted)

        self._events.publish(AlbumReloadStartedEvent(
            album_id=album_id,
            merge_policy=MergePolicy.OBJECT_TRUMP,
        ))
        return self._orchestrator.hydrate(album_id)
