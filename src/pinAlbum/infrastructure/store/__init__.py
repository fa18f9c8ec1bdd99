from .album_store import AlbumStore, WriteSession
from .merge import MergePolicy, merge_item
from .view_context import AlbumViewContext

__all__ = ["AlbumStore", "AlbumViewContext", "MergePolicy", "WriteSession", "merge_item"]
