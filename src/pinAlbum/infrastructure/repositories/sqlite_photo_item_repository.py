import logging
from typing import Any, List, Optional, Sequence, Tuple

from pinAlbum.domain.models import PhotoItem
from pinAlbum.domain.models.query import PhotoItemQuery
from pinAlbum.domain.repositories import IPhotoItemRepository
from pinAlbum.infrastructure.db.pool import ConnectionPool

_logger = logging.getLogger(__name__)

# Whitelist for ORDER BY; the column name is interpolated into the SQL
_ALLOWED_SORT_COLUMNS = {"source_url", "title", "id"}

class SQLitePhotoItemRepository(IPhotoItemRepository):
    def __init__(self, pool: ConnectionPool):
        self._pool = pool
        self._init_table()
        self._ensure_indices()

    def _init_table(self):
        with self._pool.writer() as conn:
            # UNIQUE(album_id, source_url): one item per URL per album
            conn.execute("""
                CREATE TABLE IF NOT EXISTS photo_items (
                    id TEXT PRIMARY KEY,
                    album_id TEXT NOT NULL
                        REFERENCES albums(id) ON DELETE CASCADE,
                    source_url TEXT NOT NULL,
                    title TEXT NOT NULL,
                    payload BLOB,
                    UNIQUE (album_id, source_url)
                )
            """)

    def _ensure_indices(self):
        with self._pool.writer() as conn:
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_photo_items_missing"
                " ON photo_items(album_id) WHERE payload IS NULL"
            )

    def get(self, id: str) -> Optional[PhotoItem]:
        with self._pool.connection() as conn:
            row = conn.execute("SELECT * FROM photo_items WHERE id = ?", (id,)).fetchone()
            if row:
                return self._map_row_to_item(row)
            return None

    def exists(self, id: str) -> bool:
        with self._pool.connection() as conn:
            row = conn.execute("SELECT 1 FROM photo_items WHERE id = ?", (id,)).fetchone()
            return row is not None

    def find_by_query(self, query: PhotoItemQuery) -> List[PhotoItem]:
        sql, params = self._build_sql(query)
        with self._pool.connection() as conn:
            rows = conn.execute(sql, params).fetchall()
            return [self._map_row_to_item(row) for row in rows]

    def count(self, query: PhotoItemQuery) -> int:
        sql, params = self._build_sql(query, count_only=True)
        with self._pool.connection() as conn:
            return conn.execute(sql, params).fetchone()[0]

    def save_batch(self, items: Sequence[PhotoItem]) -> None:
        data = [
            (item.id, item.album_id, item.source_url, item.title, item.payload)
            for item in items
        ]
        with self._pool.writer() as conn:
            conn.executemany("""
                INSERT INTO photo_items (id, album_id, source_url, title, payload)
                VALUES (?, ?, ?, ?, ?)
            """, data)
        _logger.debug("Inserted %d photo items", len(data))

    def update_payload(self, id: str, payload: bytes) -> bool:
        with self._pool.writer() as conn:
            cursor = conn.execute(
                "UPDATE photo_items SET payload = ? WHERE id = ?", (payload, id)
            )
            return cursor.rowcount > 0

    def delete_many(self, ids: Sequence[str]) -> List[PhotoItem]:
        if not ids:
            return []
        placeholders = ", ".join("?" for _ in ids)
        with self._pool.writer() as conn:
            rows = conn.execute(
                "SELECT id, album_id, source_url, title FROM photo_items"
                f" WHERE id IN ({placeholders})",
                list(ids),
            ).fetchall()
            conn.execute(f"DELETE FROM photo_items WHERE id IN ({placeholders})", list(ids))
            return [
                PhotoItem(
                    id=row["id"],
                    album_id=row["album_id"],
                    source_url=row["source_url"],
                    title=row["title"],
                )
                for row in rows
            ]

    def _build_sql(self, query: PhotoItemQuery, count_only: bool = False) -> Tuple[str, List[Any]]:
        if count_only:
            sql = "SELECT COUNT(*) FROM photo_items WHERE 1=1"
        else:
            sql = "SELECT * FROM photo_items WHERE 1=1"

        params: List[Any] = []
        if query.album_id:
            sql += " AND album_id = ?"
            params.append(query.album_id)

        if query.missing_payload is True:
            sql += " AND payload IS NULL"
        elif query.missing_payload is False:
            sql += " AND payload IS NOT NULL"

        if not count_only:
            order_col = query.order_by
            if order_col not in _ALLOWED_SORT_COLUMNS:
                order_col = "source_url"
            sql += f" ORDER BY {order_col} {query.order.value}"

            if query.limit:
                sql += " LIMIT ? OFFSET ?"
                params.extend([query.limit, query.offset])

        return sql, params

    def _map_row_to_item(self, row) -> PhotoItem:
        payload = row["payload"]
        return PhotoItem(
            id=row["id"],
            album_id=row["album_id"],
            source_url=row["source_url"],
            title=row["title"],
            payload=bytes(payload) if payload is not None else None,
        )
