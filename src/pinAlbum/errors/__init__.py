"""Custom exception hierarchy for pinAlbum."""

from __future__ import annotations


class PinAlbumError(Exception):
    """Base class for all custom errors raised by pinAlbum."""


# --- 3-layer hierarchy ---

class DomainError(PinAlbumError):
    """Base class for domain-level errors."""


class InfrastructureError(PinAlbumError):
    """Base class for infrastructure-level errors."""


class ApplicationError(PinAlbumError):
    """Base class for application-level errors."""


# --- Domain errors ---

class LocationNotFoundError(DomainError):
    """Raised when the requested pin location does not exist."""


class AlbumNotFoundError(DomainError):
    """Raised when the requested album cannot be located."""


class AlbumNotEmptyError(DomainError):
    """Raised when photo items are inserted into an album that still has items."""


class StaleGenerationError(DomainError):
    """Raised when a write belongs to a search generation the album has left."""


# --- Infrastructure errors: search ---

class SearchError(InfrastructureError):
    """Base class for photo search failures.

    Callers treat every subclass as "search failed", never as "zero results".
    """


class SearchTransportError(SearchError):
    """Raised when the search request could not be completed."""


class SearchDecodeError(SearchError):
    """Raised when the search response envelope cannot be decoded."""


# --- Infrastructure errors: asset fetch ---

class FetchError(InfrastructureError):
    """Base class for payload download failures."""


class NetworkFetchError(FetchError):
    """Raised for any non-success transport outcome, including an empty body."""


# --- Infrastructure errors: store ---

class StoreError(InfrastructureError):
    """Base class for album store failures."""


class StoreWriteFailedError(StoreError):
    """Raised when the underlying persistence write fails."""


class ConcurrentModificationError(StoreError):
    """Raised when the object being written was removed concurrently."""


class StoreUnavailableError(StoreError):
    """Raised when the persistent store cannot be opened at startup."""


class ConnectionPoolExhausted(StoreError):
    """Raised when no connections are available in the pool."""


# --- Infrastructure errors: geocoding ---

class GeoError(InfrastructureError):
    """Raised when reverse geocoding fails. Cosmetic only."""


# --- Application errors ---

class BadDownloadError(ApplicationError):
    """Raised when an album could not be populated because the search failed."""


# --- DI-specific errors ---

class CircularDependencyError(PinAlbumError):
    """Raised when a circular dependency is detected during resolution."""


class ResolutionError(PinAlbumError):
    """Raised when a dependency cannot be resolved."""


# --- Settings ---

class SettingsError(PinAlbumError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""
