"""
Domain models (DTOs) for DirQuota.

These are pure data classes with no filesystem or logging dependencies.
"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Set, Iterator

from .enums import EventKind

MB = 1024 * 1024


@dataclass(frozen=True)
class DirectoryQuota:
    """A configured directory and the maximum size it may occupy."""
    path: str
    max_size_mb: int
    recursive: bool = False

    @property
    def max_size_bytes(self) -> int:
        return self.max_size_mb * MB

    def child(self, name: str) -> "DirectoryQuota":
        """Quota for a subdirectory: same limit, always recursive."""
        return DirectoryQuota(
            path=os.path.join(self.path, name),
            max_size_mb=self.max_size_mb,
            recursive=True,
        )


@dataclass(frozen=True)
class FileEntry:
    """A directory entry snapshot taken at listing time."""
    name: str
    path: str
    is_dir: bool
    is_file: bool
    size_bytes: int = 0
    mtime: Optional[datetime] = None
    stat_error: Optional[str] = None  # Set when metadata could not be read


@dataclass
class EvictionOutcome:
    """What one enforcement pass did to one directory."""
    path: str
    limit_bytes: int
    initial_size_bytes: int = 0
    final_size_bytes: int = 0
    freed_bytes: int = 0
    deleted: List[str] = field(default_factory=list)
    skipped_files: Set[str] = field(default_factory=set)
    list_error: Optional[str] = None
    aborted: bool = False              # Stopped by an unexpected delete error
    error_count: int = 0               # Error events emitted for this directory
    children: List["EvictionOutcome"] = field(default_factory=list)

    @property
    def freed_mb(self) -> int:
        return self.freed_bytes // MB

    @property
    def within_quota(self) -> bool:
        return self.list_error is None and self.final_size_bytes <= self.limit_bytes

    def walk(self) -> Iterator["EvictionOutcome"]:
        """This outcome and every descendant outcome, depth-first."""
        stack = [self]
        while stack:
            outcome = stack.pop()
            yield outcome
            stack.extend(reversed(outcome.children))


@dataclass(frozen=True)
class QuotaEvent:
    """A structured progress or error event."""
    kind: EventKind
    path: str = ""
    size_bytes: Optional[int] = None
    freed_bytes: Optional[int] = None
    final_size_bytes: Optional[int] = None
    limit_bytes: Optional[int] = None
    count: Optional[int] = None
    error: Optional[str] = None
    dry_run: bool = False
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class RunReport:
    """Result of one run over all configured directories."""
    outcomes: List[EvictionOutcome] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    def all_outcomes(self) -> Iterator[EvictionOutcome]:
        for outcome in self.outcomes:
            yield from outcome.walk()

    @property
    def directories_processed(self) -> int:
        return sum(1 for o in self.all_outcomes() if o.list_error is None)

    @property
    def files_deleted(self) -> int:
        return sum(len(o.deleted) for o in self.all_outcomes())

    @property
    def freed_bytes(self) -> int:
        return sum(o.freed_bytes for o in self.all_outcomes())

    @property
    def error_count(self) -> int:
        return sum(o.error_count for o in self.all_outcomes())
