"""
Service handles for a backup run.

A BackupContext is built once from Settings and passed to every operation.
Credentials come from boto3's default chain (environment, shared config,
web identity), so the same job runs on a workstation, in CI, or under an
IRSA / OIDC role without changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import boto3
import structlog
from boto3.s3.transfer import TransferConfig
from botocore.config import Config

from secretarchive.config import Settings
from secretarchive.core.errors import ConfigurationError

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class BackupContext:
    """Clients and destination shared, read-only, by every operation."""

    secrets_client: Any
    s3_client: Any
    bucket: str
    transfer_config: TransferConfig

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        session: boto3.session.Session | None = None,
    ) -> "BackupContext":
        if not settings.s3_bucket:
            raise ConfigurationError(
                "No destination bucket configured",
                {"hint": "pass --bucket or set AWS_S3_BUCKET"},
            )

        if session is None:
            session = boto3.session.Session(region_name=settings.aws_region)

        s3_config = Config(
            s3={"addressing_style": "path" if settings.s3_force_path_style else "auto"}
        )

        context = cls(
            secrets_client=session.client("secretsmanager"),
            s3_client=session.client(
                "s3",
                config=s3_config,
                endpoint_url=settings.s3_endpoint_url,
            ),
            bucket=settings.s3_bucket,
            transfer_config=build_transfer_config(settings.multipart_chunksize),
        )
        logger.debug(
            "backup_context_created",
            region=session.region_name,
            bucket=context.bucket,
            endpoint_url=settings.s3_endpoint_url,
        )
        return context


def build_transfer_config(chunksize: int) -> TransferConfig:
    """Multipart settings for backup uploads.

    Payloads larger than one part are split into ``chunksize`` parts. Threads
    stay off so every upload completes on the calling thread.
    """
    return TransferConfig(
        multipart_threshold=chunksize,
        multipart_chunksize=chunksize,
        use_threads=False,
    )
