from unittest.mock import MagicMock, Mock

import pytest

from pinAlbum.application.interfaces import ILocationNamer
from pinAlbum.application.services import (
    HydrationOrchestrator,
    HydrationOutcome,
    HydrationScheduler,
    ReloadCoordinator,
)
from pinAlbum.application.services.pin_service import PinService
from pinAlbum.application.use_cases import (
    DeletePhotosRequest,
    DeletePhotosUseCase,
    DeletePinRequest,
    DeletePinUseCase,
    DropPinRequest,
    DropPinResponse,
    DropPinUseCase,
    OpenAlbumRequest,
    OpenAlbumUseCase,
    ReloadAlbumRequest,
    ReloadAlbumUseCase,
)
from pinAlbum.errors import BadDownloadError, NetworkFetchError, SearchTransportError


@pytest.fixture
def scheduler():
    s = HydrationScheduler(max_workers=2)
    yield s
    s.shutdown()


@pytest.fixture
def orchestrator(store, search_client, fetcher, event_bus):
    return HydrationOrchestrator(store, search_client, fetcher, event_bus)


@pytest.fixture
def namer():
    n = Mock(spec=ILocationNamer)
    n.display_name.return_value = "Rome, Lazio"
    return n


@pytest.fixture
def drop_pin(store, orchestrator, scheduler, namer):
    return DropPinUseCase(store, orchestrator, scheduler, namer)


@pytest.fixture
def open_album(store, orchestrator, scheduler):
    return OpenAlbumUseCase(store, orchestrator, scheduler)


def test_drop_pin_creates_album_and_hydrates(drop_pin, store, scheduler, search_client, make_candidates):
    search_client.results = make_candidates("u/a", "u/b")

    resp = drop_pin.execute(DropPinRequest(latitude=41.9, longitude=12.5))

    assert resp.success
    assert resp.hydration.result(timeout=5) is HydrationOutcome.COMPLETE
    scheduler.wait_idle(timeout=5)
    assert store.get_album(resp.album_id).download_complete is True
    assert store.get_location(resp.location_id).display_name == "Rome, Lazio"


def test_drop_pin_keeps_unknown_name(drop_pin, store, scheduler, namer):
    namer.display_name.return_value = "Unknown"

    resp = drop_pin.execute(DropPinRequest(latitude=0.0, longitude=0.0))
    scheduler.wait_idle(timeout=5)

    assert store.get_location(resp.location_id).display_name == "Unknown"


def test_drop_pin_rejects_bad_coordinates(drop_pin, store):
    resp = drop_pin.execute(DropPinRequest(latitude=95.0, longitude=0.0))

    assert not resp.success
    assert "out of range" in resp.error
    assert store.list_locations() == []


def test_open_album_resumes_interrupted_download(drop_pin, open_album, store, scheduler, search_client, fetcher, make_candidates):
    search_client.results = make_candidates("u/a", "u/b", "u/c")
    fetcher.fail("u/b")
    dropped = drop_pin.execute(DropPinRequest(latitude=1.0, longitude=2.0))
    with pytest.raises(NetworkFetchError):
        dropped.hydration.result(timeout=5)
    scheduler.wait_idle(timeout=5)

    fetcher.failures.clear()
    resp = open_album.execute(OpenAlbumRequest(location_id=dropped.location_id))

    assert resp.success
    assert [item.source_url for item in resp.items] == ["u/c", "u/b", "u/a"]
    assert (resp.progress.downloaded, resp.progress.total) == (1, 3)
    assert resp.resumed is not None
    assert resp.resumed.result(timeout=5) is HydrationOutcome.COMPLETE
    assert store.count_missing_payloads(dropped.album_id) == 0


def test_open_album_complete_does_not_resume(drop_pin, open_album, scheduler, search_client, make_candidates):
    search_client.results = make_candidates("u/a")
    dropped = drop_pin.execute(DropPinRequest(latitude=1.0, longitude=2.0))
    dropped.hydration.result(timeout=5)
    scheduler.wait_idle(timeout=5)

    resp = open_album.execute(OpenAlbumRequest(location_id=dropped.location_id))

    assert resp.resumed is None
    assert resp.download_complete is True
    assert resp.title == "Rome, Lazio"


def test_open_album_after_failed_search_searches_again(drop_pin, open_album, store, scheduler, search_client, make_candidates):
    search_client.error = SearchTransportError("offline")
    dropped = drop_pin.execute(DropPinRequest(latitude=1.0, longitude=2.0))
    with pytest.raises(BadDownloadError):
        dropped.hydration.result(timeout=5)
    scheduler.wait_idle(timeout=5)

    search_client.error = None
    search_client.results = make_candidates("u/a")
    resp = open_album.execute(OpenAlbumRequest(location_id=dropped.location_id))

    assert resp.items == ()
    assert resp.resumed.result(timeout=5) is HydrationOutcome.COMPLETE
    assert [item.source_url for item in store.photo_items(dropped.album_id)] == ["u/a"]


def test_open_album_unknown_pin(open_album):
    resp = open_album.execute(OpenAlbumRequest(location_id="nope"))
    assert not resp.success


def test_delete_photos(store, make_candidates):
    album_id = store.create_location_and_album(1.0, 1.0).album_id
    items = store.replace_photo_items(album_id, make_candidates("u/a", "u/b"))
    other = store.create_location_and_album(2.0, 2.0).album_id
    foreign = store.replace_photo_items(other, make_candidates("u/x"))

    resp = DeletePhotosUseCase(store).execute(
        DeletePhotosRequest(album_id=album_id, item_ids=(items[0].id, foreign[0].id))
    )

    assert resp.deleted_count == 1
    assert resp.remaining_count == 1
    assert store.count_items(other) == 1


def test_reload_album_use_case(store, orchestrator, scheduler, event_bus, search_client, make_candidates):
    album_id = store.create_location_and_album(1.0, 1.0).album_id
    search_client.results = make_candidates("old/a")
    orchestrator.hydrate(album_id)
    search_client.results = make_candidates("new/a", "new/b")

    use_case = ReloadAlbumUseCase(store, ReloadCoordinator(store, orchestrator, event_bus), scheduler)
    resp = use_case.execute(ReloadAlbumRequest(album_id=album_id))

    assert resp.reload.result(timeout=5) is HydrationOutcome.COMPLETE
    assert [i.source_url for i in store.photo_items(album_id)] == ["new/b", "new/a"]
    assert not use_case.execute(ReloadAlbumRequest(album_id="missing")).success


def test_delete_pin(store):
    location = store.create_location_and_album(1.0, 1.0)
    use_case = DeletePinUseCase(store)

    assert use_case.execute(DeletePinRequest(location_id=location.id)).success
    assert store.get_album(location.album_id) is None
    assert not use_case.execute(DeletePinRequest(location_id=location.id)).success


def test_pin_service_delegates_to_use_cases():
    store = MagicMock()
    drop_uc, open_uc, delete_photos_uc, reload_uc, delete_pin_uc = (MagicMock() for _ in range(5))
    drop_uc.execute.return_value = DropPinResponse(location_id="l1", album_id="a1")

    service = PinService(store, drop_uc, open_uc, delete_photos_uc, reload_uc, delete_pin_uc)

    assert service.drop_pin(1.0, 2.0).album_id == "a1"
    service.open_album("l1")
    service.delete_photos("a1", ["i1", "i2"])
    service.reload_album("a1")
    service.delete_pin("l1")
    service.list_pins()

    assert drop_uc.execute.call_args[0][0] == DropPinRequest(latitude=1.0, longitude=2.0)
    assert delete_photos_uc.execute.call_args[0][0] == DeletePhotosRequest(album_id="a1", item_ids=("i1", "i2"))
    open_uc.execute.assert_called_once()
    reload_uc.execute.assert_called_once()
    delete_pin_uc.execute.assert_called_once()
    store.list_locations.assert_called_once()
