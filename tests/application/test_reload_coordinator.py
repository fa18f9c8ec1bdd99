import sqlite3
import threading

import pytest

from pinAlbum.application.services import HydrationOrchestrator, HydrationOutcome, ReloadCoordinator
from pinAlbum.domain.models import MergePolicy
from pinAlbum.errors import AlbumNotFoundError, StoreWriteFailedError
from pinAlbum.events import AlbumReloadStartedEvent, PhotoItemsDeletedEvent, PhotoItemsInsertedEvent


@pytest.fixture
def orchestrator(store, search_client, fetcher, event_bus):
    return HydrationOrchestrator(store, search_client, fetcher, event_bus)


@pytest.fixture
def coordinator(store, orchestrator, event_bus):
    return ReloadCoordinator(store, orchestrator, event_bus)


@pytest.fixture
def hydrated_album(store, orchestrator, search_client, make_candidates):
    album_id = store.create_location_and_album(-33.86, 151.21).album_id
    search_client.results = make_candidates("old/a", "old/b")
    orchestrator.hydrate(album_id)
    return album_id


def test_reload_replaces_items(coordinator, store, search_client, make_candidates, hydrated_album):
    search_client.results = make_candidates("new/x", "new/y", "new/z")

    assert coordinator.reload(hydrated_album) is HydrationOutcome.COMPLETE

    urls = [item.source_url for item in store.photo_items(hydrated_album)]
    assert urls == ["new/z", "new/y", "new/x"]
    assert store.require_album(hydrated_album).download_complete is True


def test_old_items_gone_before_search_starts(coordinator, store, search_client, event_bus, make_candidates, hydrated_album):
    seen_at_search = []
    search_client.before_return = lambda: seen_at_search.append(store.count_items(hydrated_album))
    search_client.results = make_candidates("new/x")

    coordinator.reload(hydrated_album)

    assert seen_at_search == [0]


def test_event_order_is_delete_then_reload_then_insert(coordinator, search_client, event_bus, make_candidates, hydrated_album):
    order = []
    event_bus.subscribe(PhotoItemsDeletedEvent, lambda e: order.append(("deleted", e.merge_policy)))
    event_bus.subscribe(AlbumReloadStartedEvent, lambda e: order.append(("reload", e.merge_policy)))
    event_bus.subscribe(PhotoItemsInsertedEvent, lambda e: order.append(("inserted", e.merge_policy)))
    search_client.results = make_candidates("new/x")

    coordinator.reload(hydrated_album)

    assert order == [
        ("deleted", MergePolicy.OBJECT_TRUMP),
        ("reload", MergePolicy.OBJECT_TRUMP),
        ("inserted", MergePolicy.STORE_TRUMP),
    ]


def test_reload_to_empty_result(coordinator, store, search_client, hydrated_album):
    search_client.results = []

    assert coordinator.reload(hydrated_album) is HydrationOutcome.NO_RESULTS

    album = store.require_album(hydrated_album)
    assert album.no_results_found is True
    assert store.count_items(hydrated_album) == 0


def test_failed_delete_keeps_old_items(coordinator, store, search_client, monkeypatch, hydrated_album):
    def broken(ids):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(store._items, "delete_many", broken)

    with pytest.raises(StoreWriteFailedError):
        coordinator.reload(hydrated_album)

    assert store.count_items(hydrated_album) == 2
    assert search_client.calls == [(-33.86, 151.21)]
    assert store.require_album(hydrated_album).download_complete is True


def test_delete_and_generation_bump_commit_together(coordinator, store, monkeypatch, hydrated_album):
    generation = store.require_album(hydrated_album).generation

    def broken(*args, **kwargs):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(store._albums, "update_flags", broken)

    with pytest.raises(StoreWriteFailedError):
        coordinator.reload(hydrated_album)

    monkeypatch.undo()
    assert store.count_items(hydrated_album) == 2
    assert store.require_album(hydrated_album).generation == generation


def test_reload_fences_hydrate_still_searching(coordinator, orchestrator, store, search_client, event_bus, make_candidates):
    album_id = store.create_location_and_album(48.85, 2.35).album_id
    searching = threading.Event()
    release = threading.Event()

    def hold_background_search():
        if threading.current_thread() is not threading.main_thread():
            searching.set()
            release.wait(5)

    search_client.before_return = hold_background_search
    search_client.results = make_candidates("first/a")

    outcomes = {}
    first = threading.Thread(target=lambda: outcomes.update(first=orchestrator.hydrate(album_id)))
    first.start()
    assert searching.wait(5)

    def let_first_finish(event):
        release.set()
        first.join(5)
        search_client.results = make_candidates("new/x", "new/y")

    event_bus.subscribe(AlbumReloadStartedEvent, let_first_finish)

    assert coordinator.reload(album_id) is HydrationOutcome.COMPLETE
    assert outcomes["first"] is HydrationOutcome.SUPERSEDED
    assert [item.source_url for item in store.photo_items(album_id)] == ["new/y", "new/x"]
    album = store.require_album(album_id)
    assert (album.download_complete, album.no_results_found) == (True, False)


def test_reload_stops_download_in_progress(coordinator, orchestrator, store, search_client, fetcher, make_candidates):
    album_id = store.create_location_and_album(48.85, 2.35).album_id
    search_client.results = make_candidates("old/a", "old/b", "old/c")
    fetching = threading.Event()
    release = threading.Event()

    def hold_background_fetch(url):
        if threading.current_thread() is not threading.main_thread() and url == "old/b":
            fetching.set()
            release.wait(5)

    fetcher.on_fetch = hold_background_fetch
    outcomes = {}
    first = threading.Thread(target=lambda: outcomes.update(first=orchestrator.hydrate(album_id)))
    first.start()
    assert fetching.wait(5)

    search_client.results = make_candidates("new/x")
    assert coordinator.reload(album_id) is HydrationOutcome.COMPLETE
    release.set()
    first.join(5)

    assert outcomes["first"] is HydrationOutcome.SUPERSEDED
    assert [item.source_url for item in store.photo_items(album_id)] == ["new/x"]
    assert store.require_album(album_id).download_complete is True
    assert "old/a" not in fetcher.calls


def test_reload_unknown_album(coordinator):
    with pytest.raises(AlbumNotFoundError):
        coordinator.reload("missing")
