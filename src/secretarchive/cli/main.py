"""
secretarchive entry point.

Usage:
    secretarchive [--region REGION] [--bucket BUCKET] [--dry-run]

Runs one backup pass and exits; scheduling is left to cron, a Kubernetes
CronJob, or similar.
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from pydantic import ValidationError

from secretarchive.cli.backup import backup_command
from secretarchive.config import get_settings
from secretarchive.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="secretarchive",
        description="Back up AWS Secrets Manager secrets to S3",
    )
    parser.add_argument("--region", help="AWS region (or AWS_REGION env var)")
    parser.add_argument("--bucket", help="Destination S3 bucket (or AWS_S3_BUCKET env var)")
    parser.add_argument("--endpoint-url", help="Custom S3 endpoint URL")
    parser.add_argument("--dry-run", action="store_true",
                        help="Compare only, do not upload")
    parser.add_argument("--output", choices=["text", "json"], default="text",
                        help="Summary output format")
    parser.add_argument("--log-level", help="Log level (default: SECRETARCHIVE_LOG_LEVEL or INFO)")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    log_level = args.log_level
    if log_level is None:
        try:
            log_level = get_settings().log_level
        except ValidationError:
            # backup_command reports invalid settings with its own exit code
            log_level = "INFO"
    configure_logging(log_level)

    sys.exit(backup_command(
        region=args.region,
        bucket=args.bucket,
        endpoint_url=args.endpoint_url,
        dry_run=args.dry_run,
        output_format=args.output,
    ))


if __name__ == "__main__":
    main()
