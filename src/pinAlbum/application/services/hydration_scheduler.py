"""Background workers for album pipelines."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, Dict, List, Optional, Tuple

from pinAlbum.config import MAX_CONCURRENT_HYDRATIONS
from pinAlbum.errors.handler import ErrorHandler

LOGGER = logging.getLogger(__name__)

# Task kinds.  A running hydrate or reload already ends with a full resume,
# so a resume request for the same album joins it instead of starting twice.
HYDRATE = "hydrate"
RESUME = "resume"
RELOAD = "reload"
GEOCODE = "geocode"

_RESUME_JOINS = (HYDRATE, RESUME, RELOAD)


class HydrationScheduler:
    """Runs one worker per in-flight pipeline call on a shared thread pool.

    Albums are independent: tasks for different albums run concurrently with
    no shared lock.  Failures are routed to the :class:`ErrorHandler` and stay
    available on the returned future.
    """

    def __init__(
        self,
        error_handler: Optional[ErrorHandler] = None,
        max_workers: int = MAX_CONCURRENT_HYDRATIONS,
    ) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="hydration")
        self._errors = error_handler
        self._lock = threading.Lock()
        self._in_flight: Dict[str, List[Tuple[str, Future]]] = defaultdict(list)

    def submit(self, album_id: str, kind: str, fn: Callable, *args, **kwargs) -> Future:
        with self._lock:
            if kind == RESUME:
                for running_kind, future in self._in_flight[album_id]:
                    if running_kind in _RESUME_JOINS and not future.done():
                        LOGGER.debug("Album %s already has a %s running", album_id, running_kind)
                        return future
            future = self._executor.submit(fn, *args, **kwargs)
            self._in_flight[album_id].append((kind, future))
        future.add_done_callback(lambda f: self._on_done(album_id, kind, f))
        return future

    def in_flight(self, album_id: str) -> List[str]:
        with self._lock:
            return [kind for kind, future in self._in_flight.get(album_id, []) if not future.done()]

    def wait_idle(self, album_id: Optional[str] = None, timeout: Optional[float] = None) -> bool:
        """Block until the album's (or every album's) tasks finish."""
        with self._lock:
            if album_id is None:
                futures = [f for entries in self._in_flight.values() for _, f in entries]
            else:
                futures = [f for _, f in self._in_flight.get(album_id, [])]
        _, not_done = wait(futures, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _on_done(self, album_id: str, kind: str, future: Future) -> None:
        with self._lock:
            entries = self._in_flight.get(album_id, [])
            self._in_flight[album_id] = [entry for entry in entries if entry[1] is not future]
            if not self._in_flight[album_id]:
                del self._in_flight[album_id]

        if future.cancelled():
            return
        error = future.exception()
        if error is None:
            return
        if self._errors is not None:
            self._errors.handle(error, context={"album_id": album_id, "task": kind})
        else:
            LOGGER.error("%s of album %s failed: %s", kind, album_id, error)
