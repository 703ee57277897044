"""
Services for DirQuota.

Business logic for enforcing directory quotas.
"""

from .enforcer import QuotaEnforcer, DirectoryState
from .runner import QuotaRunService

__all__ = [
    "QuotaEnforcer",
    "DirectoryState",
    "QuotaRunService",
]
