"""
Adapters for DirQuota.

Implementations of the port interfaces, plus the config file reader.
"""

from .local_fs import LocalFS
from .logging_sink import LoggingEventSink, RecordingEventSink
from .config_file import parse_config, read_config

__all__ = [
    "LocalFS",
    "LoggingEventSink",
    "RecordingEventSink",
    "parse_config",
    "read_config",
]
