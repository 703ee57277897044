"""
Tests for LocalFS.

These tests verify listing and deletion against a real temporary
directory, and the error types the enforcer relies on.
"""

import os
import time
import pytest
import tempfile
from datetime import datetime
from pathlib import Path

from dirquota_core.adapters.local_fs import LocalFS
from dirquota_core.adapters.logging_sink import RecordingEventSink
from dirquota_core.domain.enums import EventKind
from dirquota_core.domain.models import MB, DirectoryQuota
from dirquota_core.services.enforcer import QuotaEnforcer

running_as_root = hasattr(os, "geteuid") and os.geteuid() == 0


def make_file(path: Path, size: int, age_seconds: int = 0) -> Path:
    """Create a sparse file of the given size with an mtime in the past."""
    with open(path, "wb") as f:
        f.truncate(size)
    stamp = time.time() - age_seconds
    os.utime(path, (stamp, stamp))
    return path


class TestLocalFSListing:
    """Test scandir()."""

    @pytest.fixture
    def temp_dir(self):
        """Create a temporary directory with test files."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "test.txt").write_text("Hello, World!")
            (Path(tmpdir) / "a_first.txt").write_text("a")

            sub_dir = Path(tmpdir) / "subdir"
            sub_dir.mkdir()
            (sub_dir / "nested.txt").write_text("Nested content")

            yield Path(tmpdir)

    def test_scandir_lists_immediate_entries(self, temp_dir):
        fs = LocalFS()
        entries = fs.scandir(str(temp_dir))

        names = [e.name for e in entries]
        assert names == ["a_first.txt", "subdir", "test.txt"]
        assert "nested.txt" not in names

    def test_scandir_metadata(self, temp_dir):
        fs = LocalFS()
        entries = {e.name: e for e in fs.scandir(str(temp_dir))}

        test_file = entries["test.txt"]
        assert test_file.size_bytes == 13  # len("Hello, World!")
        assert test_file.is_file
        assert not test_file.is_dir
        assert test_file.path == os.path.join(str(temp_dir), "test.txt")
        assert test_file.stat_error is None
        assert entries["subdir"].is_dir
        assert not entries["subdir"].is_file

    def test_scandir_does_not_follow_symlinks(self, temp_dir):
        os.symlink(temp_dir / "test.txt", temp_dir / "link.txt")
        fs = LocalFS()
        entries = {e.name: e for e in fs.scandir(str(temp_dir))}

        link = entries["link.txt"]
        assert not link.is_file
        assert not link.is_dir

    def test_scandir_missing_directory(self, temp_dir):
        fs = LocalFS()
        with pytest.raises(FileNotFoundError):
            fs.scandir(str(temp_dir / "nope"))

    def test_scandir_on_file(self, temp_dir):
        fs = LocalFS()
        with pytest.raises(NotADirectoryError):
            fs.scandir(str(temp_dir / "test.txt"))

    @pytest.mark.skipif(running_as_root, reason="root ignores directory permissions")
    def test_scandir_unreadable_directory(self, temp_dir):
        locked = temp_dir / "locked"
        locked.mkdir()
        locked.chmod(0o000)
        try:
            fs = LocalFS()
            with pytest.raises(PermissionError):
                fs.scandir(str(locked))
        finally:
            locked.chmod(0o755)


class TestLocalFSUnrepresentableMtime:
    """An mtime datetime cannot hold becomes a stat error, not a crash."""

    @pytest.fixture
    def temp_dir(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            make_file(Path(tmpdir) / "normal.bin", MB, age_seconds=100)
            yield Path(tmpdir)

    def test_far_future_mtime_on_disk(self, temp_dir):
        odd = temp_dir / "future.bin"
        make_file(odd, MB)
        try:
            os.utime(odd, (1e12, 1e12))
        except (OSError, OverflowError):
            pytest.skip("filesystem rejects far-future timestamps")
        try:
            datetime.fromtimestamp(os.stat(odd).st_mtime)
            pytest.skip("filesystem clamps far-future timestamps")
        except (ValueError, OverflowError):
            pass
        sink = RecordingEventSink()

        outcome = QuotaEnforcer(LocalFS(), sink).enforce(
            DirectoryQuota(str(temp_dir), max_size_mb=0)
        )

        assert sink.paths(EventKind.STAT_ERROR) == [str(odd)]
        assert odd.exists()
        assert not (temp_dir / "normal.bin").exists()
        assert outcome.error_count == 1

    def test_mtime_conversion_failure(self, temp_dir, monkeypatch):
        class BrokenDatetime:
            @staticmethod
            def fromtimestamp(ts):
                raise OverflowError("timestamp out of range for platform time_t")

        monkeypatch.setattr("dirquota_core.adapters.local_fs.datetime", BrokenDatetime)

        entries = LocalFS().scandir(str(temp_dir))

        assert len(entries) == 1
        assert not entries[0].is_file
        assert "out of range" in entries[0].stat_error


class TestLocalFSDelete:
    """Test delete()."""

    @pytest.fixture
    def temp_dir(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "victim.txt").write_text("bye")
            (Path(tmpdir) / "subdir").mkdir()
            yield Path(tmpdir)

    def test_delete_removes_file(self, temp_dir):
        fs = LocalFS()
        fs.delete(str(temp_dir / "victim.txt"))

        assert not (temp_dir / "victim.txt").exists()
        assert fs.stats["delete_count"] == 1

    def test_delete_missing_file(self, temp_dir):
        fs = LocalFS()
        with pytest.raises(FileNotFoundError):
            fs.delete(str(temp_dir / "gone.txt"))

    def test_delete_refuses_directories(self, temp_dir):
        fs = LocalFS()
        with pytest.raises(IsADirectoryError):
            fs.delete(str(temp_dir / "subdir"))
        assert (temp_dir / "subdir").is_dir()

    @pytest.mark.skipif(running_as_root, reason="root ignores directory permissions")
    def test_delete_in_read_only_directory(self, temp_dir):
        temp_dir.chmod(0o555)
        try:
            fs = LocalFS()
            with pytest.raises(PermissionError):
                fs.delete(str(temp_dir / "victim.txt"))
        finally:
            temp_dir.chmod(0o755)
        assert (temp_dir / "victim.txt").exists()


class TestLocalFSAllowedRoots:
    """Test path validation with allowed roots."""

    @pytest.fixture
    def temp_dirs(self):
        """Create two temporary directories."""
        with tempfile.TemporaryDirectory() as allowed, \
             tempfile.TemporaryDirectory() as forbidden:

            (Path(allowed) / "allowed.txt").write_text("allowed")
            (Path(forbidden) / "forbidden.txt").write_text("forbidden")

            yield Path(allowed), Path(forbidden)

    def test_allowed_root_access(self, temp_dirs):
        allowed, forbidden = temp_dirs
        fs = LocalFS(allowed_roots=[allowed])

        assert [e.name for e in fs.scandir(str(allowed))] == ["allowed.txt"]
        fs.delete(str(allowed / "allowed.txt"))
        assert not (allowed / "allowed.txt").exists()

    def test_forbidden_root_blocked(self, temp_dirs):
        allowed, forbidden = temp_dirs
        fs = LocalFS(allowed_roots=[allowed])

        with pytest.raises(PermissionError, match="not under any allowed root"):
            fs.scandir(str(forbidden))
        with pytest.raises(PermissionError, match="not under any allowed root"):
            fs.delete(str(forbidden / "forbidden.txt"))
        assert (forbidden / "forbidden.txt").exists()


class TestEnforcerOnDisk:
    """End-to-end enforcement against a real directory tree."""

    @pytest.fixture
    def temp_dir(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    def test_oldest_files_are_removed(self, temp_dir):
        for i, name in enumerate(["d.bin", "c.bin", "b.bin", "a.bin"]):
            # d.bin is newest, a.bin oldest
            make_file(temp_dir / name, MB, age_seconds=100 * (i + 1))
        sink = RecordingEventSink()

        outcome = QuotaEnforcer(LocalFS(), sink).enforce(
            DirectoryQuota(str(temp_dir), max_size_mb=2)
        )

        assert sorted(p.name for p in temp_dir.iterdir()) == ["c.bin", "d.bin"]
        assert outcome.freed_mb == 2
        assert len(sink.of_kind(EventKind.FILE_DELETED)) == 2

    def test_recursive_tree(self, temp_dir):
        make_file(temp_dir / "top.bin", MB, age_seconds=10)
        sub = temp_dir / "sub"
        sub.mkdir()
        make_file(sub / "old.bin", MB, age_seconds=200)
        make_file(sub / "new.bin", MB, age_seconds=100)
        (sub / "empty").mkdir()

        outcome = QuotaEnforcer(LocalFS(), RecordingEventSink()).enforce(
            DirectoryQuota(str(temp_dir), max_size_mb=1, recursive=True)
        )

        assert (temp_dir / "top.bin").exists()
        assert not (sub / "old.bin").exists()
        assert (sub / "new.bin").exists()
        assert [o.freed_mb for o in outcome.walk()] == [0, 1, 0]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
