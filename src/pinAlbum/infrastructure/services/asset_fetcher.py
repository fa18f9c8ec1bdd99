import logging
from typing import Optional

import requests

from pinAlbum.application.interfaces import IAssetFetcher
from pinAlbum.config import HTTP_TIMEOUT_SEC
from pinAlbum.errors import NetworkFetchError

_logger = logging.getLogger(__name__)


class HttpAssetFetcher(IAssetFetcher):
    """Blocking single-shot download of a URL's body."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = HTTP_TIMEOUT_SEC):
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch(self, url: str) -> bytes:
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise NetworkFetchError(f"GET {url} failed: {exc}") from exc

        body = response.content
        if not body:
            raise NetworkFetchError(f"GET {url} returned an empty body")
        _logger.debug("Fetched %d bytes from %s", len(body), url)
        return body
