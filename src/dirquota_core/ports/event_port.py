"""
Event sink port interface.

The enforcer never formats log text; it emits QuotaEvent objects and
the sink decides how to render or record them.
"""

from abc import ABC, abstractmethod

from ..domain.models import QuotaEvent


class EventSink(ABC):
    """Receives one event per state transition of a run."""

    @abstractmethod
    def emit(self, event: QuotaEvent) -> None:
        """Handle a single event."""
        pass
