import sqlite3
from unittest.mock import patch

import pytest

from pinAlbum.domain.models import MergePolicy, SearchCandidate, SortOrder
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
    LocationCreatedEvent,
    LocationDeletedEvent,
    PhotoItemsDeletedEvent,
    PhotoItemsInsertedEvent,
    PhotoItemUpdatedEvent,
)
from pinAlbum.infrastructure.db.pool import ConnectionPool
from pinAlbum.infrastructure.store import AlbumStore


@pytest.fixture
def album(store):
    location = store.create_location_and_album(48.8566, 2.3522)
    return store.require_album(location.album_id)


def _populate(store, album_id, *urls):
    return store.replace_photo_items(
        album_id, [SearchCandidate(url=url, title=url[-1]) for url in sorted(urls)]
    )


def test_create_location_and_album(store, event_bus):
    received = []
    event_bus.subscribe(LocationCreatedEvent, received.append)

    location = store.create_location_and_album(10.0, 20.0)

    album = store.get_album_for_location(location.id)
    assert album is not None
    assert album.id == location.album_id
    assert album.download_complete is False
    assert album.no_results_found is False
    assert store.get_location(location.id).display_name == "Unknown"
    assert [e.album_id for e in received] == [album.id]


def test_list_locations_carries_album_ids(store):
    first = store.create_location_and_album(1.0, 1.0)
    second = store.create_location_and_album(2.0, 2.0)

    listed = {location.id: location.album_id for location in store.list_locations()}

    assert listed == {first.id: first.album_id, second.id: second.album_id}


def test_rename_location(store):
    location = store.create_location_and_album(1.0, 1.0)
    store.rename_location(location.id, "Paris, Ile-de-France")
    assert store.get_location(location.id).display_name == "Paris, Ile-de-France"

    with pytest.raises(LocationNotFoundError):
        store.rename_location("missing", "x")


def test_photo_items_sorted_descending(store, album):
    _populate(store, album.id, "u/a", "u/z", "u/m")

    assert [i.source_url for i in store.photo_items(album.id)] == ["u/z", "u/m", "u/a"]
    assert [i.source_url for i in store.photo_items(album.id, SortOrder.ASC)] == ["u/a", "u/m", "u/z"]
    assert all(item.payload is None for item in store.photo_items(album.id))


def test_replace_photo_items_requires_empty_album(store, album):
    _populate(store, album.id, "u/a")
    with pytest.raises(AlbumNotEmptyError):
        _populate(store, album.id, "u/b")
    assert store.count_items(album.id) == 1


def test_replace_photo_items_rejects_stale_generation(store, album):
    store.mark_album_flags(album.id, False, False)
    with pytest.raises(StaleGenerationError):
        store.replace_photo_items(album.id, [SearchCandidate("u/a", "a")], generation=album.generation)
    assert store.count_items(album.id) == 0


def test_replace_photo_items_unknown_album(store):
    with pytest.raises(AlbumNotFoundError):
        _populate(store, "nope", "u/a")


def test_inserted_event_reports_counts(store, album, event_bus):
    received = []
    event_bus.subscribe(PhotoItemsInsertedEvent, received.append)

    _populate(store, album.id, "u/a", "u/b")

    assert len(received) == 1
    assert received[0].count_before == 0
    assert received[0].count_after == 2
    assert len(received[0].items) == 2


def test_set_payload_and_progress(store, album):
    items = _populate(store, album.id, "u/a", "u/b")

    store.set_payload(items[0].id, b"bytes")

    assert store.get_item(items[0].id).payload == b"bytes"
    progress = store.progress(album.id)
    assert (progress.downloaded, progress.total) == (1, 2)
    assert store.count_missing_payloads(album.id) == 1


def test_set_payload_on_deleted_item_raises(store, album):
    items = _populate(store, album.id, "u/a")
    store.delete_items([items[0].id])

    with pytest.raises(ConcurrentModificationError):
        store.set_payload(items[0].id, b"late")


def test_download_complete_rejected_while_payloads_missing(store, album):
    items = _populate(store, album.id, "u/a", "u/b")
    store.set_payload(items[0].id, b"x")

    assert store.mark_album_flags(album.id, True, False) is False
    assert store.require_album(album.id).download_complete is False

    store.set_payload(items[1].id, b"y")
    assert store.mark_album_flags(album.id, True, False) is True
    assert store.require_album(album.id).download_complete is True


def test_no_results_flag_requires_empty_album(store, album):
    _populate(store, album.id, "u/a")
    assert store.mark_album_flags(album.id, True, True) is False

    store.delete_items([i.id for i in store.photo_items(album.id)])
    assert store.mark_album_flags(album.id, True, True) is True
    refreshed = store.require_album(album.id)
    assert refreshed.download_complete and refreshed.no_results_found


def test_reset_bumps_generation(store, album, event_bus):
    received = []
    event_bus.subscribe(AlbumFlagsChangedEvent, received.append)

    store.mark_album_flags(album.id, False, False)
    store.mark_album_flags(album.id, False, False)

    assert store.require_album(album.id).generation == album.generation + 2
    assert [e.generation for e in received] == [album.generation + 1, album.generation + 2]


def test_flags_with_stale_generation_are_ignored(store, album):
    old = album.generation
    store.mark_album_flags(album.id, False, False)

    assert store.mark_album_flags(album.id, True, True, generation=old) is False
    assert store.require_album(album.id).no_results_found is False


def test_start_generation_returns_new_generation(store, album):
    assert store.start_generation(album.id) == album.generation + 1
    assert store.start_generation(album.id) == album.generation + 2


def test_clear_album_fences_older_generation(store, album, event_bus):
    old = store.start_generation(album.id)
    _populate(store, album.id, "u/a", "u/b")
    received = []
    event_bus.subscribe(PhotoItemsDeletedEvent, lambda e: received.append(("deleted", e.merge_policy)))
    event_bus.subscribe(AlbumFlagsChangedEvent, lambda e: received.append(("flags", e.merge_policy)))

    assert store.clear_album(album.id) == 2

    assert store.count_items(album.id) == 0
    assert store.require_album(album.id).generation == old + 1
    assert received == [("deleted", MergePolicy.OBJECT_TRUMP), ("flags", MergePolicy.OBJECT_TRUMP)]
    with pytest.raises(StaleGenerationError):
        store.replace_photo_items(album.id, [SearchCandidate(url="late/a", title="a")], generation=old)


def test_delete_items_event_counts_and_policy(store, album, event_bus):
    items = _populate(store, album.id, "u/a", "u/b", "u/c")
    received = []
    event_bus.subscribe(PhotoItemsDeletedEvent, received.append)

    deleted = store.delete_items([items[0].id, items[1].id, "unknown"], merge_policy=MergePolicy.OBJECT_TRUMP)

    assert deleted == 2
    assert received[0].count_before == 3
    assert received[0].count_after == 1
    assert received[0].merge_policy is MergePolicy.OBJECT_TRUMP
    assert set(received[0].item_ids) == {items[0].id, items[1].id}


def test_delete_location_cascades(store, album):
    _populate(store, album.id, "u/a")
    location_id = album.location_id

    assert store.delete_location(location_id) is True

    assert store.get_location(location_id) is None
    assert store.get_album(album.id) is None
    assert store.count_items(album.id) == 0
    assert store.delete_location(location_id) is False


def test_delete_location_event(store, album, event_bus):
    received = []
    event_bus.subscribe(LocationDeletedEvent, received.append)

    store.delete_location(album.location_id)

    assert received[0].album_id == album.id


def test_session_batches_events_until_commit(store, album, event_bus):
    received = []
    event_bus.subscribe(PhotoItemUpdatedEvent, received.append)
    items = _populate(store, album.id, "u/a", "u/b")

    with store.session() as session:
        session.set_payload(items[0].id, b"1")
        session.set_payload(items[1].id, b"2")
        assert received == []

    assert len(received) == 2


def test_failed_session_rolls_back_and_publishes_nothing(store, album, event_bus):
    received = []
    event_bus.subscribe(PhotoItemUpdatedEvent, received.append)
    items = _populate(store, album.id, "u/a")

    with pytest.raises(RuntimeError):
        with store.session() as session:
            session.set_payload(items[0].id, b"1")
            raise RuntimeError("abort")

    assert store.get_item(items[0].id).payload is None
    assert received == []


def test_sqlite_failure_surfaces_as_store_write_failed(store, album):
    items = _populate(store, album.id, "u/a")

    with patch.object(store._items, "update_payload", side_effect=sqlite3.OperationalError("disk I/O error")):
        with pytest.raises(StoreWriteFailedError):
            store.set_payload(items[0].id, b"x")


def test_perform_background_task(store, album):
    future = store.perform_background_task(
        lambda session: session.replace_photo_items(album.id, [SearchCandidate("u/a", "a")])
    )
    items = future.result(timeout=5)

    assert [item.source_url for item in items] == ["u/a"]
    assert store.count_items(album.id) == 1


def test_unavailable_store(tmp_path, event_bus):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(StoreUnavailableError):
        AlbumStore(ConnectionPool(blocker / "db.sqlite"), event_bus)
