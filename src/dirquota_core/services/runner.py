"""
Run Service - processes every configured directory once.
"""

from datetime import datetime
from typing import List

from ..domain.models import DirectoryQuota, QuotaEvent, RunReport
from ..domain.enums import EventKind
from .enforcer import QuotaEnforcer


class QuotaRunService:
    """
    Enforces a list of quotas in order, one whole subtree at a time.

    Per-directory failures are reported as events and counted in the
    RunReport; they never stop the run.
    """

    def __init__(self, enforcer: QuotaEnforcer):
        self.enforcer = enforcer

    def run(self, quotas: List[DirectoryQuota]) -> RunReport:
        events = self.enforcer.events
        report = RunReport()
        events.emit(QuotaEvent(kind=EventKind.RUN_STARTED, count=len(quotas),
                               dry_run=self.enforcer.dry_run))

        for quota in quotas:
            report.outcomes.append(self.enforcer.enforce(quota))

        report.finished_at = datetime.now()
        events.emit(QuotaEvent(
            kind=EventKind.RUN_FINISHED,
            freed_bytes=report.freed_bytes,
            count=report.error_count,
            dry_run=self.enforcer.dry_run,
        ))
        return report
