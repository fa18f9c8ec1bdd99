"""Default configuration values for pinAlbum."""

from __future__ import annotations

from typing import Final

# Flickr REST endpoint used for both geo and text searches.  The query string
# is assembled by the search client; only scheme, host and path live here.
FLICKR_API_ENDPOINT: Final[str] = "https://www.flickr.com/services/rest/"
FLICKR_SEARCH_METHOD: Final[str] = "flickr.photos.search"

# Image URLs are built as ``https://<host>/<server>/<id>_<secret>.jpg``.
FLICKR_IMAGE_HOST: Final[str] = "live.staticflickr.com"

# Upper bound on the number of photos kept from a single search.  Dense areas
# return hundreds of hits and the album must stay small enough to hydrate.
MAX_PHOTOS_PER_ALBUM: Final[int] = 50

# Empty titles are replaced by ``"<prefix>: <index>"``.
PLACEHOLDER_TITLE_PREFIX: Final[str] = "Flick"

UNKNOWN_LOCATION_NAME: Final[str] = "Unknown"

HTTP_TIMEOUT_SEC: Final[float] = 30.0
MAX_CONCURRENT_HYDRATIONS: Final[int] = 4

DATABASE_FILE_NAME: Final[str] = "pinAlbum.sqlite"
READER_POOL_SIZE: Final[int] = 5

API_KEY_ENV_VAR: Final[str] = "PINALBUM_FLICKR_API_KEY"
