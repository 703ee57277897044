"""
Filesystem port interface.

Defines the two filesystem capabilities the quota enforcer needs:
listing a directory and deleting a file.
"""

from abc import ABC, abstractmethod
from typing import List

from ..domain.models import FileEntry


class FSPort(ABC):
    """
    Abstract interface for filesystem operations.

    Errors are reported with the built-in OSError hierarchy so callers can
    tell a permission problem from a vanished file from anything else.
    """

    @abstractmethod
    def scandir(self, path: str) -> List[FileEntry]:
        """
        List the immediate entries of a directory.

        Args:
            path: Directory to list

        Returns:
            FileEntry snapshots in a deterministic order. Entries whose
            metadata could not be read carry stat_error instead of a size.

        Raises:
            FileNotFoundError: Directory does not exist
            NotADirectoryError: Path is not a directory
            PermissionError: Directory cannot be read
            OSError: Any other failure
        """
        pass

    @abstractmethod
    def delete(self, path: str) -> None:
        """
        Remove a single file.

        Raises:
            PermissionError: Removal was denied
            FileNotFoundError: File is already gone
            OSError: Any other failure (treated as fatal for the directory)
        """
        pass
