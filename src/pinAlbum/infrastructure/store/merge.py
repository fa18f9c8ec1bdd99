"""Merge rules between store notifications and reader state."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from pinAlbum.domain.models import MergePolicy, PhotoItem


def merge_item(
    local: Optional[PhotoItem],
    incoming: PhotoItem,
    pending: Optional[MergePolicy] = None,
) -> Optional[PhotoItem]:
    """Return the reader's copy of an item after a store update arrives.

    *local* is what the reader currently holds (``None`` when it holds nothing
    for that id), *incoming* is the committed store value and *pending* is the
    policy of a delete the reader has requested but not yet seen committed.

    An update never creates a row the reader does not hold: rows only enter a
    reader through inserts or a refresh, so a late update for a deleted row
    cannot resurrect it.
    """

    if local is None:
        return None
    if pending is MergePolicy.OBJECT_TRUMP:
        # The reader is about to discard this row; its intent wins.
        return local
    # Store trump: committed property values replace the stale in-memory copy.
    return replace(local, title=incoming.title, payload=incoming.payload)


__all__ = ["MergePolicy", "merge_item"]
