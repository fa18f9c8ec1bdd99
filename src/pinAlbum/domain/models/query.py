from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SortOrder(Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass
class PhotoItemQuery:
    """Photo item query object - Fluent API for building query conditions.

    The default ordering (``source_url`` descending) is both the display order
    and the download order.
    """

    album_id: Optional[str] = None
    missing_payload: Optional[bool] = None
    limit: Optional[int] = None
    offset: int = 0
    order_by: str = "source_url"
    order: SortOrder = SortOrder.DESC

    def with_album_id(self, album_id: str):
        self.album_id = album_id
        return self

    def only_missing_payload(self):
        self.missing_payload = True
        return self

    def only_hydrated(self):
        self.missing_payload = False
        return self

    def sorted(self, order: SortOrder):
        self.order = order
        return self

    def paginate(self, page: int, page_size: int):
        self.offset = (page - 1) * page_size
        self.limit = page_size
        return self
