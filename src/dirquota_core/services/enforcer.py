"""
Quota Enforcer Service.

Brings one directory (and optionally each of its subdirectories) under
its size limit by deleting files, oldest modification time first.
"""

import logging
from typing import Dict, List, Optional, Tuple

from ..ports.fs_port import FSPort
from ..ports.event_port import EventSink
from ..domain.models import DirectoryQuota, FileEntry, EvictionOutcome, QuotaEvent
from ..domain.enums import EventKind, DeleteFailure

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONSECUTIVE_DENIALS = 5


class DirectoryState:
    """
    Working set for one enforcement pass over one directory.

    total_size_bytes is the sum of listing-time sizes of every file that
    has not been deleted. Skipped files stay counted since they still
    occupy space.
    """

    def __init__(self, files: List[FileEntry]):
        # name -> (listing position, entry); position breaks mtime ties
        self._candidates: Dict[str, Tuple[int, FileEntry]] = {
            entry.name: (pos, entry) for pos, entry in enumerate(files)
        }
        self.total_size_bytes = sum(entry.size_bytes for entry in files)

    def __len__(self) -> int:
        return len(self._candidates)

    def oldest(self) -> FileEntry:
        """Candidate with the oldest mtime, first-listed on ties."""
        _, entry = min(
            self._candidates.values(),
            key=lambda item: (item[1].mtime, item[0]),
        )
        return entry

    def mark_deleted(self, entry: FileEntry):
        del self._candidates[entry.name]
        self.total_size_bytes -= entry.size_bytes

    def discard(self, entry: FileEntry):
        """Drop a candidate without touching the size total."""
        del self._candidates[entry.name]


class QuotaEnforcer:
    """
    Service that enforces a DirectoryQuota.

    Failures never escape enforce(): an unlistable directory, an
    unreadable entry, or a failed delete is reported to the event sink
    and reflected in the returned EvictionOutcome.
    """

    def __init__(
        self,
        fs: FSPort,
        events: EventSink,
        max_consecutive_denials: Optional[int] = DEFAULT_MAX_CONSECUTIVE_DENIALS,
        dry_run: bool = False,
    ):
        """
        Initialize the enforcer.

        Args:
            fs: Filesystem adapter used for listing and deleting
            events: Sink receiving progress and error events
            max_consecutive_denials: Give up on a directory after this many
                skipped files in a row (None = try every candidate)
            dry_run: Select files as usual but never delete them
        """
        if max_consecutive_denials is not None and max_consecutive_denials < 1:
            raise ValueError("max_consecutive_denials must be at least 1")
        self.fs = fs
        self.events = events
        self.max_consecutive_denials = max_consecutive_denials
        self.dry_run = dry_run

    def enforce(self, quota: DirectoryQuota) -> EvictionOutcome:
        """
        Enforce a quota on one directory, then on its subdirectories
        if the quota is recursive.

        Subdirectories are visited depth-first in listing order using an
        explicit stack, so tree depth is not bounded by the interpreter's
        recursion limit.

        Returns:
            EvictionOutcome for the directory, with one child outcome per
            subdirectory visited
        """
        root, subdirs = self._enforce_directory(quota)
        # (quota, parent outcome); reversed so the first-listed child pops first
        stack: List[Tuple[DirectoryQuota, EvictionOutcome]] = [
            (child, root) for child in reversed(subdirs)
        ]

        while stack:
            child_quota, parent = stack.pop()
            outcome, subdirs = self._enforce_directory(child_quota)
            parent.children.append(outcome)
            stack.extend((child, outcome) for child in reversed(subdirs))

        return root

    def _enforce_directory(
        self, quota: DirectoryQuota
    ) -> Tuple[EvictionOutcome, List[DirectoryQuota]]:
        """One eviction pass over a single directory; returns its outcome
        and the subdirectory quotas still to visit."""
        outcome = EvictionOutcome(path=quota.path, limit_bytes=quota.max_size_bytes)

        try:
            entries = self.fs.scandir(quota.path)
        except OSError as e:
            outcome.list_error = str(e)
            self._emit(outcome, EventKind.LIST_ERROR, quota.path, error=str(e))
            return outcome, []

        files = self._collect_files(entries, outcome)
        state = DirectoryState(files)
        outcome.initial_size_bytes = state.total_size_bytes
        logger.debug("%s: %d files, %d bytes, limit %d bytes",
                     quota.path, len(files), state.total_size_bytes, outcome.limit_bytes)

        self._evict(state, outcome)

        outcome.final_size_bytes = state.total_size_bytes
        self._emit(
            outcome,
            EventKind.DIRECTORY_SUMMARY,
            quota.path,
            freed_bytes=outcome.freed_bytes,
            final_size_bytes=outcome.final_size_bytes,
            limit_bytes=outcome.limit_bytes,
        )

        if not quota.recursive:
            return outcome, []
        return outcome, [quota.child(entry.name) for entry in entries if entry.is_dir]

    def _collect_files(self, entries: List[FileEntry], outcome: EvictionOutcome) -> List[FileEntry]:
        """Regular files with readable metadata, in listing order."""
        files: List[FileEntry] = []
        for entry in entries:
            if entry.stat_error is not None:
                self._emit(outcome, EventKind.STAT_ERROR, entry.path, error=entry.stat_error)
            elif entry.is_file:
                files.append(entry)
        return files

    def _evict(self, state: DirectoryState, outcome: EvictionOutcome):
        """Delete oldest files until the directory fits or nothing is left to try."""
        denials = 0

        while state.total_size_bytes > outcome.limit_bytes and len(state) > 0:
            entry = state.oldest()

            try:
                if not self.dry_run:
                    self.fs.delete(entry.path)
            except OSError as e:
                failure = DeleteFailure.classify(e)
                if not failure.tolerated:
                    outcome.aborted = True
                    self._emit(outcome, EventKind.DELETE_ERROR, entry.path, error=str(e))
                    return

                state.discard(entry)
                outcome.skipped_files.add(entry.path)
                if failure is DeleteFailure.DENIED:
                    self._emit(outcome, EventKind.DELETE_DENIED, entry.path, error=str(e))
                else:
                    self._emit(outcome, EventKind.FILE_VANISHED, entry.path)

                denials += 1
                if self.max_consecutive_denials is not None and denials >= self.max_consecutive_denials:
                    self._emit(outcome, EventKind.DENIAL_LIMIT_REACHED, outcome.path, count=denials)
                    return
                continue

            denials = 0
            state.mark_deleted(entry)
            outcome.freed_bytes += entry.size_bytes
            outcome.deleted.append(entry.path)
            self._emit(outcome, EventKind.FILE_DELETED, entry.path, size_bytes=entry.size_bytes)

    def _emit(self, outcome: EvictionOutcome, kind: EventKind, path: str, **fields):
        if kind.is_error:
            outcome.error_count += 1
        self.events.emit(QuotaEvent(kind=kind, path=path, dry_run=self.dry_run, **fields))
