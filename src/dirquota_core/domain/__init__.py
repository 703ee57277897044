"""
Domain models for DirQuota.

Contains DTOs, enums, and exceptions used throughout the application.
"""

from .models import (
    MB,
    DirectoryQuota,
    FileEntry,
    EvictionOutcome,
    QuotaEvent,
    RunReport,
)
from .enums import (
    EventKind,
    DeleteFailure,
)
from .errors import (
    StartupError,
    ConfigError,
)

__all__ = [
    # Models
    "MB",
    "DirectoryQuota",
    "FileEntry",
    "EvictionOutcome",
    "QuotaEvent",
    "RunReport",
    # Enums
    "EventKind",
    "DeleteFailure",
    # Errors
    "StartupError",
    "ConfigError",
]
