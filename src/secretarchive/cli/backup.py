"""
CLI command for the secret backup run.

Commands:
    secretarchive --bucket <bucket>             - Archive every secret's current version
    secretarchive --bucket <bucket> --dry-run   - Show what would be archived
    secretarchive --bucket <bucket> --output json
"""

from __future__ import annotations

from typing import Any, Optional

import boto3
from pydantic import ValidationError as PydanticValidationError

from secretarchive.cli.ux import console, header, info, print_table, success, warning
from secretarchive.config import Settings, get_settings
from secretarchive.context import BackupContext
from secretarchive.core.errors import ConfigurationError, ExitCode, main_with_error_handling
from secretarchive.models import BackupReport
from secretarchive.workflows.backup import run_backup


def resolve_settings(
    settings: Settings | None = None,
    *,
    region: Optional[str] = None,
    bucket: Optional[str] = None,
    endpoint_url: Optional[str] = None,
) -> Settings:
    """Apply command-line overrides on top of environment settings."""
    if settings is None:
        try:
            settings = get_settings()
        except PydanticValidationError as exc:
            raise ConfigurationError(
                "Invalid settings",
                {"fields": ",".join(str(e["loc"][0]) for e in exc.errors() if e["loc"])},
            ) from exc
    base = settings
    overrides: dict[str, Any] = {
        "aws_region": region,
        "s3_bucket": bucket,
        "s3_endpoint_url": endpoint_url,
    }
    update = {k: v for k, v in overrides.items() if v}
    return base.model_copy(update=update) if update else base


@main_with_error_handling()
def backup_command(
    region: Optional[str] = None,
    bucket: Optional[str] = None,
    endpoint_url: Optional[str] = None,
    dry_run: bool = False,
    output_format: str = "text",
    settings: Settings | None = None,
    session: boto3.session.Session | None = None,
) -> int:
    """
    Back up every secret's current version to S3.

    Exit codes:
        0 - Pass completed (secrets with unreadable values are skipped)
        10 - No bucket configured
        11 - Listing or upload failed
        12 - No secrets found

    Args:
        region: AWS region (or AWS_REGION)
        bucket: Destination bucket (or AWS_S3_BUCKET)
        endpoint_url: Custom S3 endpoint for S3-compatible storage
        dry_run: If True, compare only and never upload
        output_format: Output format ("text" or "json")
        settings: Settings to start from instead of the environment
        session: boto3 session to build clients from

    Returns:
        Exit code
    """
    resolved = resolve_settings(
        settings, region=region, bucket=bucket, endpoint_url=endpoint_url
    )
    context = BackupContext.from_settings(resolved, session=session)

    report = run_backup(context, dry_run=dry_run)

    if output_format == "json":
        console.print_json(data=report.to_dict())
    else:
        _print_report(report)

    return ExitCode.SUCCESS


def _print_report(report: BackupReport) -> None:
    """Print the run summary as a table."""
    title = f"Secret backup: s3://{report.bucket}"
    if report.dry_run:
        title += " (dry run)"
    header(title)

    rows = [
        [o.name, str(o.decision) if o.decision else "failed", o.key or o.error or ""]
        for o in report.outcomes
    ]
    print_table("Secrets", ["Secret", "Result", "Key / Error"], rows)
    console.print()

    if report.failed:
        warning(f"{report.failed} secret(s) skipped after fetch errors")
    if report.dry_run:
        info(f"{report.planned} backup(s) would be created, {report.skipped} current")
    else:
        success(f"{report.uploaded} backup(s) created, {report.skipped} current")
