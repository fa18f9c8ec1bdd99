import sys
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from pinAlbum.application.interfaces import IAssetFetcher, ISearchClient
from pinAlbum.domain.models import SearchCandidate
from pinAlbum.errors import NetworkFetchError
from pinAlbum.events.bus import EventBus
from pinAlbum.infrastructure.db.pool import ConnectionPool
from pinAlbum.infrastructure.store import AlbumStore


class FakeSearchClient(ISearchClient):
    """Returns canned candidates, or raises ``error`` when set."""

    def __init__(self, results: Optional[Sequence[SearchCandidate]] = None):
        self.results: List[SearchCandidate] = list(results or [])
        self.error: Optional[Exception] = None
        self.before_return: Optional[Callable[[], None]] = None
        self.calls: List[tuple] = []

    def search(self, latitude, longitude):
        self.calls.append((latitude, longitude))
        if self.before_return is not None:
            self.before_return()
        if self.error is not None:
            raise self.error
        return list(self.results)


class FakeFetcher(IAssetFetcher):
    """Serves ``b"img:" + url`` and records the order of requests."""

    def __init__(self):
        self.calls: List[str] = []
        self.failures: Dict[str, Exception] = {}
        self.on_fetch: Optional[Callable[[str], None]] = None
        self._lock = threading.Lock()

    def fetch(self, url):
        with self._lock:
            self.calls.append(url)
        if self.on_fetch is not None:
            self.on_fetch(url)
        if url in self.failures:
            raise self.failures[url]
        return b"img:" + url.encode()

    def fail(self, url, error=None):
        self.failures[url] = error or NetworkFetchError(f"GET {url} failed")


def candidates(*urls: str) -> List[SearchCandidate]:
    return [SearchCandidate(url=url, title=f"t-{url}") for url in sorted(urls)]


@pytest.fixture
def event_bus():
    bus = EventBus()
    yield bus
    bus.shutdown()


@pytest.fixture
def pool(tmp_path):
    return ConnectionPool(tmp_path / "albums.sqlite", pool_size=3)


@pytest.fixture
def store(pool, event_bus):
    album_store = AlbumStore(pool, event_bus)
    yield album_store
    album_store.close()


@pytest.fixture
def search_client():
    return FakeSearchClient()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def make_candidates():
    return candidates
