from typing import Any, List, Optional, Tuple

from pinAlbum.domain.models import Album
from pinAlbum.domain.repositories import IAlbumRepository
from pinAlbum.infrastructure.db.pool import ConnectionPool

class SQLiteAlbumRepository(IAlbumRepository):
    def __init__(self, pool: ConnectionPool):
        self._pool = pool
        self._init_table()

    def _init_table(self):
        with self._pool.writer() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS albums (
                    id TEXT PRIMARY KEY,
                    location_id TEXT NOT NULL UNIQUE
                        REFERENCES locations(id) ON DELETE CASCADE,
                    download_complete INTEGER NOT NULL DEFAULT 0,
                    no_results_found INTEGER NOT NULL DEFAULT 0,
                    generation INTEGER NOT NULL DEFAULT 0
                )
            """)

    def get(self, id: str) -> Optional[Album]:
        with self._pool.connection() as conn:
            row = conn.execute("SELECT * FROM albums WHERE id = ?", (id,)).fetchone()
            if row:
                return self._map_row_to_album(row)
            return None

    def get_by_location(self, location_id: str) -> Optional[Album]:
        with self._pool.connection() as conn:
            row = conn.execute(
                "SELECT * FROM albums WHERE location_id = ?", (location_id,)
            ).fetchone()
            if row:
                return self._map_row_to_album(row)
            return None

    def save(self, album: Album) -> None:
        with self._pool.writer() as conn:
            conn.execute("""
                INSERT OR REPLACE INTO albums
                (id, location_id, download_complete, no_results_found, generation)
                VALUES (?, ?, ?, ?, ?)
            """, (
                album.id,
                album.location_id,
                int(album.download_complete),
                int(album.no_results_found),
                album.generation,
            ))

    def update_flags(
        self,
        id: str,
        download_complete: bool,
        no_results_found: bool,
        expected_generation: Optional[int] = None,
    ) -> bool:
        sql, params = self._build_flags_sql(id, download_complete, no_results_found, expected_generation)
        with self._pool.writer() as conn:
            cursor = conn.execute(sql, params)
            return cursor.rowcount > 0

    def _build_flags_sql(
        self,
        id: str,
        download_complete: bool,
        no_results_found: bool,
        expected_generation: Optional[int],
    ) -> Tuple[str, List[Any]]:
        sql = "UPDATE albums SET download_complete = ?, no_results_found = ?"
        params: List[Any] = [int(download_complete), int(no_results_found)]

        if not download_complete and not no_results_found:
            # A reset starts a new search generation
            sql += ", generation = generation + 1"

        sql += " WHERE id = ?"
        params.append(id)

        if download_complete:
            if no_results_found:
                sql += " AND NOT EXISTS (SELECT 1 FROM photo_items WHERE album_id = ?)"
            else:
                sql += (
                    " AND NOT EXISTS (SELECT 1 FROM photo_items"
                    " WHERE album_id = ? AND payload IS NULL)"
                )
            params.append(id)

        if expected_generation is not None:
            sql += " AND generation = ?"
            params.append(expected_generation)

        return sql, params

    def _map_row_to_album(self, row) -> Album:
        return Album(
            id=row["id"],
            location_id=row["location_id"],
            download_complete=bool(row["download_complete"]),
            no_results_found=bool(row["no_results_found"]),
            generation=row["generation"],
        )
