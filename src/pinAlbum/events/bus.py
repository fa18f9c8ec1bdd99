import logging
import threading
import uuid
from collections import defaultdict
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Type


@dataclass(kw_only=True)
class Event:
    """Base event class for infrastructure notifications (errors, lifecycle)."""
    timestamp: datetime = field(default_factory=datetime.now)
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass
class Subscription:
    """Handle returned by subscribe(); can be used to unsubscribe."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    event_type: Type = Event
    handler: Callable = field(default=lambda e: None)
    active: bool = True

    def cancel(self):
        self.active = False


class EventBus:
    """Publish/subscribe channel for store mutations and pipeline progress.

    Handlers are keyed by event class.  Subscribing to a base class receives
    every subclass as well, so a consumer interested in all album mutations
    can subscribe once to the common base event.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, max_workers: int = 4):
        self._logger = logger or logging.getLogger(__name__)
        self._sync_handlers: Dict[Type, List[Subscription]] = defaultdict(list)
        self._async_handlers: Dict[Type, List[Subscription]] = defaultdict(list)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="event-bus")
        self._lock = threading.Lock()

    def subscribe(self, event_type: Type, handler: Callable, async_: bool = False) -> Subscription:
        sub = Subscription(event_type=event_type, handler=handler)
        with self._lock:
            if async_:
                self._async_handlers[event_type].append(sub)
            else:
                self._sync_handlers[event_type].append(sub)
        return sub

    def unsubscribe(self, subscription: Subscription):
        subscription.active = False
        with self._lock:
            for store in (self._sync_handlers, self._async_handlers):
                for subs in store.values():
                    try:
                        subs.remove(subscription)
                    except ValueError:
                        pass

    def _collect(self, event) -> tuple:
        sync_subs: List[Subscription] = []
        async_subs: List[Subscription] = []
        with self._lock:
            for klass in type(event).__mro__:
                sync_subs.extend(self._sync_handlers.get(klass, ()))
                async_subs.extend(self._async_handlers.get(klass, ()))
        return sync_subs, async_subs

    def publish(self, event):
        sync_subs, async_subs = self._collect(event)
        event_name = type(event).__name__

        # Synchronous handlers run on the publishing thread, in subscription order
        for sub in sync_subs:
            if not sub.active:
                continue
            try:
                sub.handler(event)
            except Exception as exc:
                self._logger.error("Sync handler failed for %s: %s", event_name, exc)

        for sub in async_subs:
            if not sub.active:
                continue
            self._executor.submit(self._safe_async_call, sub.handler, event)

    def publish_async(self, event) -> List[Future]:
        """Submit all handlers (sync and async) to the thread pool, return futures."""
        sync_subs, async_subs = self._collect(event)
        futures: List[Future] = []
        for sub in sync_subs + async_subs:
            if not sub.active:
                continue
            futures.append(self._executor.submit(self._safe_async_call, sub.handler, event))
        return futures

    def _safe_async_call(self, handler, event):
        try:
            handler(event)
        except Exception as exc:
            self._logger.error("Async handler failed for %s: %s", type(event).__name__, exc)

    def shutdown(self):
        self._executor.shutdown(wait=True)
