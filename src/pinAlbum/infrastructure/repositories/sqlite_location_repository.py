from typing import List, Optional
from datetime import datetime

from pinAlbum.domain.models import Location
from pinAlbum.domain.repositories import ILocationRepository
from pinAlbum.infrastructure.db.pool import ConnectionPool

_SELECT_LOCATION = """
    SELECT l.*, a.id AS album_id
    FROM locations l
    LEFT JOIN albums a ON a.location_id = l.id
"""

class SQLiteLocationRepository(ILocationRepository):
    def __init__(self, pool: ConnectionPool):
        self._pool = pool
        self._init_table()

    def _init_table(self):
        with self._pool.writer() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS locations (
                    id TEXT PRIMARY KEY,
                    latitude REAL NOT NULL,
                    longitude REAL NOT NULL,
                    display_name TEXT NOT NULL,
                    created_at TEXT
                )
            """)

    def get(self, id: str) -> Optional[Location]:
        with self._pool.connection() as conn:
            row = conn.execute(_SELECT_LOCATION + " WHERE l.id = ?", (id,)).fetchone()
            if row:
                return self._map_row_to_location(row)
            return None

    def list_all(self) -> List[Location]:
        with self._pool.connection() as conn:
            rows = conn.execute(_SELECT_LOCATION + " ORDER BY l.created_at").fetchall()
            return [self._map_row_to_location(row) for row in rows]

    def save(self, location: Location) -> None:
        with self._pool.writer() as conn:
            conn.execute("""
                INSERT OR REPLACE INTO locations
                (id, latitude, longitude, display_name, created_at)
                VALUES (?, ?, ?, ?, ?)
            """, (
                location.id,
                location.latitude,
                location.longitude,
                location.display_name,
                location.created_at.isoformat() if location.created_at else None,
            ))

    def rename(self, id: str, display_name: str) -> bool:
        with self._pool.writer() as conn:
            cursor = conn.execute(
                "UPDATE locations SET display_name = ? WHERE id = ?", (display_name, id)
            )
            return cursor.rowcount > 0

    def delete(self, id: str) -> bool:
        # albums and photo_items go with it through ON DELETE CASCADE
        with self._pool.writer() as conn:
            cursor = conn.execute("DELETE FROM locations WHERE id = ?", (id,))
            return cursor.rowcount > 0

    def _map_row_to_location(self, row) -> Location:
        created_at = datetime.fromisoformat(row["created_at"]) if row["created_at"] else None
        return Location(
            id=row["id"],
            latitude=row["latitude"],
            longitude=row["longitude"],
            display_name=row["display_name"],
            created_at=created_at,
            album_id=row["album_id"],
        )
