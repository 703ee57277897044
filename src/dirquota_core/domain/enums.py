"""
Enumerations for DirQuota domain.
"""

from enum import Enum


class EventKind(str, Enum):
    """Kinds of events emitted while enforcing quotas."""
    RUN_STARTED = "run_started"
    RUN_FINISHED = "run_finished"
    LIST_ERROR = "list_error"           # Directory could not be listed
    STAT_ERROR = "stat_error"           # Entry metadata could not be read
    FILE_DELETED = "file_deleted"
    DELETE_DENIED = "delete_denied"     # Permission denied, file skipped
    FILE_VANISHED = "file_vanished"     # Removed by someone else first
    DELETE_ERROR = "delete_error"       # Fatal for the current directory
    DENIAL_LIMIT_REACHED = "denial_limit_reached"
    DIRECTORY_SUMMARY = "directory_summary"

    @property
    def is_error(self) -> bool:
        return self in (
            EventKind.LIST_ERROR,
            EventKind.STAT_ERROR,
            EventKind.DELETE_DENIED,
            EventKind.DELETE_ERROR,
        )


class DeleteFailure(str, Enum):
    """Classification of a failed delete attempt."""
    DENIED = "denied"
    VANISHED = "vanished"
    OTHER = "other"

    @property
    def tolerated(self) -> bool:
        """Tolerated failures skip the file; OTHER stops the directory."""
        return self is not DeleteFailure.OTHER

    @classmethod
    def classify(cls, error: OSError) -> "DeleteFailure":
        if isinstance(error, PermissionError):
            return cls.DENIED
        if isinstance(error, FileNotFoundError):
            return cls.VANISHED
        return cls.OTHER
