"""
Event sinks.

LoggingEventSink renders events as log lines; RecordingEventSink keeps
them in memory for tests and for callers that want counters.
"""

import logging
from typing import Callable, Dict, List, Optional

from ..ports.event_port import EventSink
from ..domain.models import MB, QuotaEvent
from ..domain.enums import EventKind


def _mb(value: Optional[int]) -> int:
    return (value or 0) // MB


_LEVELS: Dict[EventKind, int] = {
    EventKind.RUN_STARTED: logging.INFO,
    EventKind.RUN_FINISHED: logging.INFO,
    EventKind.LIST_ERROR: logging.ERROR,
    EventKind.STAT_ERROR: logging.WARNING,
    EventKind.FILE_DELETED: logging.INFO,
    EventKind.DELETE_DENIED: logging.WARNING,
    EventKind.FILE_VANISHED: logging.WARNING,
    EventKind.DELETE_ERROR: logging.ERROR,
    EventKind.DENIAL_LIMIT_REACHED: logging.WARNING,
    EventKind.DIRECTORY_SUMMARY: logging.INFO,
}


_FORMATTERS: Dict[EventKind, Callable[[QuotaEvent], str]] = {
    EventKind.RUN_STARTED: lambda e: f"Run started: {e.count} configured directories",
    EventKind.RUN_FINISHED: lambda e: (
        f"Run finished: freed {_mb(e.freed_bytes)} MB, {e.count} errors"
    ),
    EventKind.LIST_ERROR: lambda e: f"Cannot list directory {e.path}: {e.error}",
    EventKind.STAT_ERROR: lambda e: f"Cannot read file info {e.path}: {e.error}",
    EventKind.FILE_DELETED: lambda e: (
        f"{'Would delete' if e.dry_run else 'Deleted'} file: {e.path} ({e.size_bytes} bytes)"
    ),
    EventKind.DELETE_DENIED: lambda e: f"Permission denied deleting {e.path}: {e.error}",
    EventKind.FILE_VANISHED: lambda e: f"File already gone: {e.path}",
    EventKind.DELETE_ERROR: lambda e: (
        f"Error deleting {e.path}: {e.error}. Stopping this directory"
    ),
    EventKind.DENIAL_LIMIT_REACHED: lambda e: (
        f"Gave up on {e.path} after {e.count} failed deletions in a row"
    ),
    EventKind.DIRECTORY_SUMMARY: lambda e: (
        f"Freed {_mb(e.freed_bytes)} MB in directory {e.path} "
        f"(now {_mb(e.final_size_bytes)} MB, limit {_mb(e.limit_bytes)} MB)"
    ),
}


class LoggingEventSink(EventSink):
    """Writes one log line per event to a standard logging.Logger."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("dirquota")

    def emit(self, event: QuotaEvent) -> None:
        level = _LEVELS.get(event.kind, logging.INFO)
        self.logger.log(level, _FORMATTERS[event.kind](event))


class RecordingEventSink(EventSink):
    """Keeps every event in order, optionally forwarding to another sink."""

    def __init__(self, forward_to: Optional[EventSink] = None):
        self.events: List[QuotaEvent] = []
        self.forward_to = forward_to

    def emit(self, event: QuotaEvent) -> None:
        self.events.append(event)
        if self.forward_to is not None:
            self.forward_to.emit(event)

    def of_kind(self, kind: EventKind) -> List[QuotaEvent]:
        return [e for e in self.events if e.kind == kind]

    def paths(self, kind: EventKind) -> List[str]:
        return [e.path for e in self.of_kind(kind)]

    def clear(self):
        self.events.clear()
