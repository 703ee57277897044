"""
Shared fixtures: an in-memory filesystem and a recording event sink.
"""

import os
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from dirquota_core.adapters.logging_sink import RecordingEventSink
from dirquota_core.domain.models import MB, FileEntry
from dirquota_core.ports.fs_port import FSPort

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


class FakeFS(FSPort):
    """In-memory FSPort with injectable listing and delete failures."""

    def __init__(self):
        self.dirs: Dict[str, Dict[str, FileEntry]] = {}
        self.list_errors: Dict[str, OSError] = {}
        self.delete_errors: Dict[str, OSError] = {}
        self.delete_calls: List[str] = []
        self.scandir_calls: List[str] = []

    def add_dir(self, path: str) -> str:
        self.dirs.setdefault(path, {})
        parent, name = os.path.split(path)
        if parent in self.dirs and name:
            self.dirs[parent][name] = FileEntry(
                name=name, path=path, is_dir=True, is_file=False,
                size_bytes=4096, mtime=BASE_TIME,
            )
        return path

    def add_file(self, directory: str, name: str, size_mb: float = 1,
                 age: int = 0, size_bytes: Optional[int] = None) -> str:
        """Add a file; larger age means older (age is in minutes)."""
        self.add_dir(directory)
        path = os.path.join(directory, name)
        self.dirs[directory][name] = FileEntry(
            name=name,
            path=path,
            is_dir=False,
            is_file=True,
            size_bytes=size_bytes if size_bytes is not None else int(size_mb * MB),
            mtime=BASE_TIME - timedelta(minutes=age),
        )
        return path

    def add_unreadable(self, directory: str, name: str) -> str:
        self.add_dir(directory)
        path = os.path.join(directory, name)
        self.dirs[directory][name] = FileEntry(
            name=name, path=path, is_dir=False, is_file=False,
            stat_error=f"[Errno 13] Permission denied: '{path}'",
        )
        return path

    def fail_delete(self, path: str, error: OSError):
        self.delete_errors[path] = error

    def fail_list(self, path: str, error: OSError):
        self.list_errors[path] = error

    def names(self, directory: str) -> List[str]:
        return sorted(n for n, e in self.dirs[directory].items() if e.is_file)

    def scandir(self, path: str) -> List[FileEntry]:
        self.scandir_calls.append(path)
        if path in self.list_errors:
            raise self.list_errors[path]
        if path not in self.dirs:
            raise FileNotFoundError(2, "No such file or directory", path)
        return sorted(self.dirs[path].values(), key=lambda e: e.name)

    def delete(self, path: str) -> None:
        self.delete_calls.append(path)
        if path in self.delete_errors:
            raise self.delete_errors[path]
        directory, name = os.path.split(path)
        if name not in self.dirs.get(directory, {}):
            raise FileNotFoundError(2, "No such file or directory", path)
        del self.dirs[directory][name]


@pytest.fixture
def fake_fs():
    return FakeFS()


@pytest.fixture
def sink():
    return RecordingEventSink()
