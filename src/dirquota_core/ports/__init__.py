"""
Ports (interfaces) for DirQuota.

These define the contracts that adapters must implement.
This enables dependency injection and testing with fakes.
"""

from .fs_port import FSPort
from .event_port import EventSink

__all__ = ["FSPort", "EventSink"]
