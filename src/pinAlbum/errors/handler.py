import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from pinAlbum.errors import (
    FetchError,
    GeoError,
    StoreUnavailableError,
)
from pinAlbum.events.bus import Event, EventBus

class ErrorSeverity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

@dataclass(kw_only=True)
class ErrorOccurredEvent(Event):
    error: Exception
    severity: ErrorSeverity
    context: dict = field(default_factory=dict)

def classify(error: Exception) -> ErrorSeverity:
    """Default severity for errors escaping a background pipeline."""

    if isinstance(error, GeoError):
        # Only the display name is affected
        return ErrorSeverity.INFO
    if isinstance(error, FetchError):
        # Partial progress is kept; the next open resumes
        return ErrorSeverity.WARNING
    if isinstance(error, StoreUnavailableError):
        return ErrorSeverity.CRITICAL
    return ErrorSeverity.ERROR

class ErrorHandler:
    """Single sink for errors surfaced at an orchestration boundary.

    Logs, publishes an :class:`ErrorOccurredEvent` and, for ERROR and
    CRITICAL, tells the registered UI callback.
    """

    def __init__(self, logger: logging.Logger, event_bus: EventBus):
        self._logger = logger
        self._events = event_bus
        self._ui_callback: Optional[Callable[[str, ErrorSeverity], None]] = None

    def register_ui_callback(self, callback: Callable[[str, ErrorSeverity], None]):
        self._ui_callback = callback

    def handle(self, error: Exception, severity: Optional[ErrorSeverity] = None, context: Optional[dict] = None):
        severity = severity or classify(error)
        context = context or {}
        log = getattr(self._logger, severity.value, self._logger.error)
        # ``extra`` keys must not collide with LogRecord attributes
        log("%s: %s", type(error).__name__, error, extra={"ctx": context})

        self._events.publish(ErrorOccurredEvent(error=error, severity=severity, context=context))

        if self._ui_callback and severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL):
            self._ui_callback(str(error), severity)
