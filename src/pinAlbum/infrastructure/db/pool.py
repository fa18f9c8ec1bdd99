import logging
import sqlite3
import queue
import threading
from contextlib import contextmanager
from pathlib import Path

from pinAlbum.errors import ConnectionPoolExhausted, StoreUnavailableError

_logger = logging.getLogger(__name__)


class ConnectionPool:
    """SQLite connections split into one writer and a pool of readers.

    All mutations go through :meth:`writer`, which serialises writers behind a
    re-entrant lock and commits once the outermost block exits.  A thread that
    is inside a writer block reads through the same connection, so it sees its
    own uncommitted changes; every other thread reads the last committed state
    through the reader pool.
    """

    def __init__(self, db_path: Path, pool_size: int = 5, timeout: float = 30.0):
        self._db_path = Path(db_path)
        self._pool_size = pool_size
        self._timeout = timeout
        self._pool: queue.Queue = queue.Queue(maxsize=pool_size)
        self._created = 0
        self._lock = threading.Lock()
        self._writer_lock = threading.RLock()
        self._writer_conn: sqlite3.Connection | None = None
        self._local = threading.local()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def open(self) -> None:
        """Create the writer connection and switch the database to WAL mode."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            with self._writer_lock:
                if self._writer_conn is None:
                    conn = self._create_connection()
                    conn.execute("PRAGMA journal_mode=WAL")
                    self._writer_conn = conn
        except (OSError, sqlite3.Error) as exc:
            raise StoreUnavailableError(f"Cannot open database at {self._db_path}: {exc}") from exc
        _logger.info("Opened album database at %s", self._db_path)

    def _create_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False, timeout=self._timeout)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    def _acquire(self) -> sqlite3.Connection:
        # Try to get an existing connection without blocking
        try:
            return self._pool.get_nowait()
        except queue.Empty:
            pass

        # Lazily create a new connection if under the limit
        with self._lock:
            if self._created < self._pool_size:
                self._created += 1
                return self._create_connection()

        # All connections created and in use; wait with timeout
        try:
            return self._pool.get(timeout=self._timeout)
        except queue.Empty:
            raise ConnectionPoolExhausted(
                f"No connections available within {self._timeout}s "
                f"(pool_size={self._pool_size})"
            )

    def _release(self, conn: sqlite3.Connection):
        try:
            self._pool.put_nowait(conn)
        except queue.Full:
            conn.close()

    def in_write_transaction(self) -> bool:
        return getattr(self._local, "writer", None) is not None

    @contextmanager
    def connection(self):
        writer = getattr(self._local, "writer", None)
        if writer is not None:
            yield writer
            return

        conn = self._acquire()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._release(conn)

    @contextmanager
    def writer(self):
        with self._writer_lock:
            current = getattr(self._local, "writer", None)
            if current is not None:
                # Nested block joins the enclosing transaction
                yield current
                return

            if self._writer_conn is None:
                self.open()
            conn = self._writer_conn
            self._local.writer = conn
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                self._local.writer = None

    def close_all(self):
        while not self._pool.empty():
            try:
                conn = self._pool.get_nowait()
                conn.close()
            except queue.Empty:
                break
        with self._writer_lock:
            if self._writer_conn is not None:
                self._writer_conn.close()
                self._writer_conn = None
