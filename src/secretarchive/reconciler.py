"""
Backup reconciliation against the S3 destination bucket.

Each secret's current version is archived at ``<name>/<version_id>``. A
secret is uploaded only when that exact key is missing from the objects
listed under the ``<name>`` prefix.
"""

from __future__ import annotations

import io

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from secretarchive.context import BackupContext
from secretarchive.core.errors import ListError, Severity, UploadError
from secretarchive.models import Decision, ReconcileStage, SecretRecord
from secretarchive.pagination import PagedListing

logger = structlog.get_logger()


def iter_existing_keys(context: BackupContext, prefix: str) -> PagedListing[str]:
    """Lazy sequence of object keys under ``prefix`` in the backup bucket."""
    return PagedListing(
        context.s3_client,
        "list_objects_v2",
        "Contents",
        lambda obj: obj["Key"],
        Bucket=context.bucket,
        Prefix=prefix,
    )


def list_existing_keys(context: BackupContext, prefix: str) -> set[str]:
    """Keys already archived under ``prefix``; fetched fresh on every call."""
    try:
        return set(iter_existing_keys(context, prefix))
    except (BotoCoreError, ClientError) as exc:
        raise ListError.from_aws(
            "Failed to list objects",
            exc,
            severity=Severity.fatal,
            bucket=context.bucket,
            prefix=prefix,
        ) from exc


def upload_secret(context: BackupContext, record: SecretRecord, key: str) -> None:
    """Write the raw secret payload to ``key``, in multipart chunks when large."""
    body = io.BytesIO(record.payload_bytes())
    try:
        context.s3_client.upload_fileobj(
            body,
            context.bucket,
            key,
            Config=context.transfer_config,
        )
    except (BotoCoreError, ClientError) as exc:
        raise UploadError.from_aws(
            "Unable to upload backup",
            exc,
            severity=Severity.fatal,
            key=key,
            bucket=context.bucket,
        ) from exc


def reconcile(
    context: BackupContext,
    record: SecretRecord,
    *,
    dry_run: bool = False,
) -> Decision:
    """Archive ``record`` unless its current version is already in the bucket.

    Raises:
        ListError: the bucket could not be listed
        UploadError: the backup object could not be written
    """
    key = record.backup_key
    log = logger.bind(secret=record.name, key=key)

    existing = list_existing_keys(context, record.name)
    log.debug("reconcile_stage", stage=str(ReconcileStage.listed), existing=len(existing))

    if key in existing:
        log.info("backup_current", stage=str(ReconcileStage.skip))
        return Decision.skipped

    if dry_run:
        log.info("backup_planned")
        return Decision.planned

    log.info("backup_creating", stage=str(ReconcileStage.upload))
    upload_secret(context, record, key)
    log.info("backup_uploaded", size=len(record.payload_bytes()))
    return Decision.uploaded
