from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import structlog

from secretarchive.context import BackupContext
from secretarchive.core.errors import FetchError, Severity
from secretarchive.logging import bind_context
from secretarchive.models import BackupReport, ReconcileStage, SecretOutcome
from secretarchive.reconciler import reconcile
from secretarchive.secrets import fetch_current_value, list_secret_names

logger = structlog.get_logger()


@dataclass(slots=True)
class BackupWorkflow:
    """One sequential reconciliation pass over every secret in the account.

    Listing and upload failures propagate and abort the pass. Fetch failures
    abort only when fatal; otherwise the secret is logged and skipped.
    """

    context: BackupContext
    dry_run: bool = False
    on_outcome: Callable[[SecretOutcome], None] | None = None
    report: BackupReport = field(init=False)

    def __post_init__(self) -> None:
        self.report = BackupReport(bucket=self.context.bucket, dry_run=self.dry_run)

    def run(self) -> BackupReport:
        names = list_secret_names(self.context)
        logger.info("backup_job_started", secrets=len(names), bucket=self.context.bucket)

        for name in names:
            self._record(self._process(name))

        logger.info(
            "backup_job_completed",
            uploaded=self.report.uploaded,
            skipped=self.report.skipped,
            planned=self.report.planned,
            failed=self.report.failed,
        )
        return self.report

    def _process(self, name: str) -> SecretOutcome:
        log = bind_context(secret=name)

        try:
            record = fetch_current_value(self.context, name)
        except FetchError as exc:
            if exc.severity is Severity.fatal:
                raise
            log.warning(
                "secret_fetch_skipped",
                reason=exc.message,
                severity=str(exc.severity),
                error=exc.details.get("error"),
            )
            return SecretOutcome(name=name, error=exc.details.get("error") or exc.message)

        log.debug("reconcile_stage", stage=str(ReconcileStage.fetched))
        decision = reconcile(self.context, record, dry_run=self.dry_run)
        log.debug("reconcile_stage", stage=str(ReconcileStage.done), decision=str(decision))

        return SecretOutcome(name=name, decision=decision, key=record.backup_key)

    def _record(self, outcome: SecretOutcome) -> None:
        self.report.record(outcome)
        if self.on_outcome is not None:
            self.on_outcome(outcome)


def run_backup(context: BackupContext, *, dry_run: bool = False) -> BackupReport:
    """Run a full backup pass and return its report."""
    return BackupWorkflow(context, dry_run=dry_run).run()
