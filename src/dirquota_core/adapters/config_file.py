"""
Config file reader.

Reads the flat key=value format:

    directory_path=/var/spool/camera
    max_directory_size=500
    recursive=true

    directory_path=/var/log/app
    max_directory_size=100

Each directory_path line opens a new block; a block becomes a
DirectoryQuota when the next block opens or the file ends. Blank lines,
# comments, lines without '=', and unknown keys are ignored.
"""

from pathlib import Path
from typing import Iterable, List, Optional

from ..domain.models import DirectoryQuota
from ..domain.errors import ConfigError

KEY_PATH = "directory_path"
KEY_MAX_SIZE = "max_directory_size"
KEY_RECURSIVE = "recursive"

_BOOLEANS = {"true": True, "false": False}


class _Block:
    """A directory block being assembled."""

    def __init__(self, path: str, line_no: int):
        self.path = path
        self.line_no = line_no
        self.max_size_mb: Optional[int] = None
        self.recursive = False

    def close(self, source: str) -> DirectoryQuota:
        if self.max_size_mb is None:
            raise ConfigError(
                f"directory {self.path!r} has no {KEY_MAX_SIZE}",
                self.line_no, source,
            )
        return DirectoryQuota(
            path=self.path,
            max_size_mb=self.max_size_mb,
            recursive=self.recursive,
        )


def _parse_size(value: str, line_no: int, source: str) -> int:
    try:
        size = int(value)
    except ValueError:
        raise ConfigError(f"{KEY_MAX_SIZE} must be an integer, got {value!r}",
                          line_no, source) from None
    if size < 0:
        raise ConfigError(f"{KEY_MAX_SIZE} must not be negative, got {size}",
                          line_no, source)
    return size


def _parse_bool(value: str, line_no: int, source: str) -> bool:
    try:
        return _BOOLEANS[value.lower()]
    except KeyError:
        raise ConfigError(f"{KEY_RECURSIVE} must be true or false, got {value!r}",
                          line_no, source) from None


def parse_config(lines: Iterable[str], source: str = "") -> List[DirectoryQuota]:
    """
    Parse configuration lines into directory quotas, in file order.

    Args:
        lines: Raw config lines
        source: Name used in error messages (usually the file path)

    Raises:
        ConfigError: On a malformed value or an incomplete block
    """
    quotas: List[DirectoryQuota] = []
    current: Optional[_Block] = None

    for line_no, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip()
        value = value.strip()

        if key == KEY_PATH:
            if not value:
                raise ConfigError(f"{KEY_PATH} is empty", line_no, source)
            if current is not None:
                quotas.append(current.close(source))
            current = _Block(value, line_no)
        elif key in (KEY_MAX_SIZE, KEY_RECURSIVE):
            if current is None:
                raise ConfigError(f"{key} appears before any {KEY_PATH}",
                                  line_no, source)
            if key == KEY_MAX_SIZE:
                current.max_size_mb = _parse_size(value, line_no, source)
            else:
                current.recursive = _parse_bool(value, line_no, source)

    if current is not None:
        quotas.append(current.close(source))

    return quotas


def read_config(path: Path) -> List[DirectoryQuota]:
    """Read and parse a config file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            lines = f.readlines()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"cannot read config file: {e}", source=str(path)) from e

    return parse_config(lines, source=str(path))
