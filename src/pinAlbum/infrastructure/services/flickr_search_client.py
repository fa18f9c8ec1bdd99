"""Flickr ``photos.search`` client producing bounded, deduplicated candidates."""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Mapping, Optional, Sequence

import requests
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from pinAlbum.application.interfaces import ISearchClient
from pinAlbum.config import (
    FLICKR_API_ENDPOINT,
    FLICKR_IMAGE_HOST,
    FLICKR_SEARCH_METHOD,
    HTTP_TIMEOUT_SEC,
    MAX_PHOTOS_PER_ALBUM,
    PLACEHOLDER_TITLE_PREFIX,
)
from pinAlbum.domain.models import SearchCandidate
from pinAlbum.errors import SearchDecodeError, SearchTransportError

LOGGER = logging.getLogger(__name__)

_COUNT = {"type": ["integer", "string"]}

SEARCH_RESPONSE_SCHEMA: Dict[str, Any] = {
    "$id": "pinAlbum/flickr-search.schema.json",
    "type": "object",
    "required": ["stat", "photos"],
    "properties": {
        "stat": {"const": "ok"},
        "photos": {
            "type": "object",
            "required": ["page", "pages", "perpage", "total", "photo"],
            "properties": {
                "page": _COUNT,
                "pages": _COUNT,
                "perpage": _COUNT,
                "total": _COUNT,
                "photo": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["id", "secret", "server", "title"],
                        "properties": {
                            "id": {"type": "string", "minLength": 1},
                            "owner": {"type": "string"},
                            "secret": {"type": "string", "minLength": 1},
                            "server": {"type": "string", "minLength": 1},
                            "farm": {"type": "integer"},
                            "title": {"type": "string"},
                            "ispublic": {"type": "integer"},
                            "isfriend": {"type": "integer"},
                            "isfamily": {"type": "integer"},
                        },
                    },
                },
            },
        },
    },
}

_validator = Draft202012Validator(SEARCH_RESPONSE_SCHEMA)


def photo_url(photo: Mapping[str, Any], image_host: str = FLICKR_IMAGE_HOST) -> str:
    """Return ``https://<host>/<server>/<id>_<secret>.jpg`` for a search entry."""

    return f"https://{image_host}/{photo['server']}/{photo['id']}_{photo['secret']}.jpg"


def placeholder_title(index: int) -> str:
    return f"{PLACEHOLDER_TITLE_PREFIX}: {index}"


def build_candidates(
    photos: Sequence[Mapping[str, Any]],
    image_host: str = FLICKR_IMAGE_HOST,
    max_results: int = MAX_PHOTOS_PER_ALBUM,
    rng: Optional[random.Random] = None,
) -> List[SearchCandidate]:
    """Turn raw search entries into at most *max_results* unique candidates.

    Entries are keyed by their constructed URL (first occurrence wins), so a
    photo repeated in the response yields one candidate.  Empty titles are
    replaced by a placeholder carrying the entry's index in the raw response.
    A random subset is drawn without replacement from the unique entries and
    returned sorted ascending by URL.
    """

    by_url: Dict[str, str] = {}
    for index, photo in enumerate(photos):
        url = photo_url(photo, image_host)
        if url in by_url:
            continue
        title = photo.get("title") or ""
        by_url[url] = placeholder_title(index) if title == "" else title

    urls = list(by_url)
    if len(urls) > max_results:
        urls = (rng or random).sample(urls, max_results)
    return [SearchCandidate(url=url, title=by_url[url]) for url in sorted(urls)]


class FlickrSearchClient(ISearchClient):
    """Geo and text search against the Flickr REST API."""

    def __init__(
        self,
        api_key: str,
        session: Optional[requests.Session] = None,
        endpoint: str = FLICKR_API_ENDPOINT,
        image_host: str = FLICKR_IMAGE_HOST,
        max_results: int = MAX_PHOTOS_PER_ALBUM,
        timeout: float = HTTP_TIMEOUT_SEC,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.api_key = api_key
        self.endpoint = endpoint
        self.image_host = image_host
        self.max_results = max_results
        self.timeout = timeout
        self._rng = rng or random.Random()
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def search(self, latitude: float, longitude: float) -> List[SearchCandidate]:
        return self._search({"lat": str(float(latitude)), "lon": str(float(longitude))})

    def search_text(self, text: str) -> List[SearchCandidate]:
        """Free-text search; same post-processing as :meth:`search`."""
        return self._search({"text": text})

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _params(self, extra: Mapping[str, str]) -> Dict[str, str]:
        params = {
            "method": FLICKR_SEARCH_METHOD,
            "api_key": self.api_key,
            "format": "json",
            "nojsoncallback": "1",
        }
        params.update(extra)
        return params

    def _search(self, extra: Mapping[str, str]) -> List[SearchCandidate]:
        envelope = self._request(self._params(extra))
        photos = envelope["photos"]["photo"]
        candidates = build_candidates(photos, self.image_host, self.max_results, self._rng)
        LOGGER.info(
            "Flickr search %s returned %d photos, kept %d",
            dict(extra), len(photos), len(candidates),
        )
        return candidates

    def _request(self, params: Mapping[str, str]) -> Dict[str, Any]:
        try:
            response = self.session.get(self.endpoint, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise SearchTransportError(f"Flickr search request failed: {exc}") from exc

        try:
            envelope = response.json()
        except ValueError as exc:
            raise SearchDecodeError(f"Flickr search returned invalid JSON: {exc}") from exc

        if isinstance(envelope, dict) and envelope.get("stat") == "fail":
            raise SearchTransportError(
                f"Flickr error {envelope.get('code')}: {envelope.get('message', 'unknown')}"
            )

        try:
            _validator.validate(envelope)
        except ValidationError as exc:
            raise SearchDecodeError(f"Unexpected Flickr response: {exc.message}") from exc
        return envelope


__all__ = [
    "FlickrSearchClient",
    "SEARCH_RESPONSE_SCHEMA",
    "build_candidates",
    "photo_url",
    "placeholder_title",
]
