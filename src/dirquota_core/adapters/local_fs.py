"""
Local Filesystem Adapter.

The only place DirQuota touches the real filesystem. Listing uses
scandir/stat without following symlinks; deletion removes regular files
only, never directories.
"""

import os
from pathlib import Path
from datetime import datetime
from typing import List, Optional

from ..ports.fs_port import FSPort
from ..domain.models import FileEntry


class LocalFS(FSPort):
    """
    Filesystem implementation backed by os.scandir and os.remove.

    GUARANTEES:
    - Symlinks are listed but never followed
    - Only files are removed (directories are never deleted)
    - Paths outside allowed_roots are rejected before any I/O
    """

    def __init__(self, allowed_roots: Optional[List[Path]] = None):
        """
        Initialize the filesystem adapter.

        Args:
            allowed_roots: If provided, only allow access under these paths.
        """
        self.allowed_roots = [Path(r).resolve() for r in (allowed_roots or [])]
        self._delete_count = 0

    def _validate_path(self, path: str) -> Path:
        """Resolve a path and check it against allowed roots."""
        resolved = Path(path).resolve()

        if self.allowed_roots:
            if not any(self._is_under(resolved, root) for root in self.allowed_roots):
                raise PermissionError(
                    f"Path {resolved} is not under any allowed root. "
                    f"Allowed roots: {[str(r) for r in self.allowed_roots]}"
                )

        return resolved

    def _is_under(self, path: Path, root: Path) -> bool:
        try:
            path.relative_to(root)
            return True
        except ValueError:
            return False

    def scandir(self, path: str) -> List[FileEntry]:
        """List the immediate entries of a directory, sorted by name."""
        self._validate_path(path)

        entries: List[FileEntry] = []
        with os.scandir(path) as it:
            for entry in it:
                try:
                    stat_info = entry.stat(follow_symlinks=False)
                    entries.append(FileEntry(
                        name=entry.name,
                        path=entry.path,
                        is_dir=entry.is_dir(follow_symlinks=False),
                        is_file=entry.is_file(follow_symlinks=False),
                        size_bytes=stat_info.st_size,
                        mtime=datetime.fromtimestamp(stat_info.st_mtime),
                    ))
                except (OSError, ValueError, OverflowError) as e:
                    # Unreadable entry or an mtime datetime cannot represent
                    entries.append(FileEntry(
                        name=entry.name,
                        path=entry.path,
                        is_dir=False,
                        is_file=False,
                        stat_error=str(e),
                    ))

        entries.sort(key=lambda e: e.name)
        return entries

    def delete(self, path: str) -> None:
        """Remove a regular file."""
        resolved = self._validate_path(path)
        if resolved.is_dir():
            raise IsADirectoryError(f"Refusing to delete directory: {path}")

        os.remove(path)
        self._delete_count += 1

    @property
    def stats(self) -> dict:
        """Get deletion statistics."""
        return {
            "delete_count": self._delete_count,
        }
