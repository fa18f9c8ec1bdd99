from .core import (
    Album,
    AlbumProgress,
    HydrationState,
    Location,
    MergePolicy,
    PhotoItem,
    SearchCandidate,
)
from .query import PhotoItemQuery, SortOrder

__all__ = [
    "Album",
    "AlbumProgress",
    "HydrationState",
    "Location",
    "MergePolicy",
    "PhotoItem",
    "PhotoItemQuery",
    "SearchCandidate",
    "SortOrder",
]
