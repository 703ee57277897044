"""
Exceptions that abort a run before any directory is touched.

Everything that happens after startup is reported as a QuotaEvent instead.
"""


class StartupError(Exception):
    """The run could not start (log, config, or malformed field)."""


class ConfigError(StartupError):
    """The configuration file is unreadable or malformed."""

    def __init__(self, message: str, line_no: int = 0, source: str = ""):
        self.line_no = line_no
        self.source = source
        location = source
        if line_no:
            location = f"{source}:{line_no}" if source else f"line {line_no}"
        super().__init__(f"{location}: {message}" if location else message)
