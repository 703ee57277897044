"""
DirQuota Core - Headless library for per-directory size quotas.

Measures directory usage and deletes the oldest files until each
configured directory fits its limit. It has no CLI or logging setup
and can be embedded in other applications.
"""

__version__ = "0.1.0"

# Lazy imports to avoid loading everything at once
def __getattr__(name):
    if name == "LocalFS":
        from .adapters.local_fs import LocalFS
        return LocalFS
    elif name == "QuotaEnforcer":
        from .services.enforcer import QuotaEnforcer
        return QuotaEnforcer
    elif name == "QuotaRunService":
        from .services.runner import QuotaRunService
        return QuotaRunService
    elif name == "DirectoryQuota":
        from .domain.models import DirectoryQuota
        return DirectoryQuota
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    "__version__",
    "LocalFS",
    "QuotaEnforcer",
    "QuotaRunService",
    "DirectoryQuota",
]
