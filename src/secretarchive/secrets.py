"""
Secret enumeration against AWS Secrets Manager.

Lists every secret in the account and fetches the value currently carrying
the AWSCURRENT stage label.
"""

from __future__ import annotations

from typing import Any

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from secretarchive.context import BackupContext
from secretarchive.core.errors import (
    AccessDeniedError,
    AuthorizationError,
    EmptyResultError,
    FetchError,
    ListError,
    SecretNotFoundError,
    Severity,
    aws_error_code,
)
from secretarchive.models import SecretRecord
from secretarchive.pagination import PagedListing

logger = structlog.get_logger()

CURRENT_STAGE = "AWSCURRENT"

AUTHORIZATION_CODES = frozenset(
    {
        "AccessDeniedException",
        "AccessDenied",
        "UnrecognizedClientException",
        "InvalidClientTokenId",
        "ExpiredTokenException",
        "ExpiredToken",
    }
)

_FETCH_ERRORS: dict[str, type[FetchError]] = {
    "ResourceNotFoundException": SecretNotFoundError,
    "AccessDeniedException": AccessDeniedError,
}


def iter_secret_names(context: BackupContext) -> PagedListing[str]:
    """Lazy sequence of every secret name, in the order the store returns them."""
    return PagedListing(
        context.secrets_client,
        "list_secrets",
        "SecretList",
        lambda entry: entry["Name"],
    )


def list_secret_names(context: BackupContext) -> list[str]:
    """Materialize all secret names.

    Raises:
        AuthorizationError: the credentials may not list secrets
        ListError: listing failed for any other reason
        EmptyResultError: no secrets exist, or none are visible
    """
    try:
        names = list(iter_secret_names(context))
    except (BotoCoreError, ClientError) as exc:
        error_cls = AuthorizationError if aws_error_code(exc) in AUTHORIZATION_CODES else ListError
        raise error_cls.from_aws(
            "Unable to list secrets", exc, severity=Severity.fatal
        ) from exc

    if not names:
        raise EmptyResultError(
            "No secrets found. Verify account and permissions.",
            severity=Severity.fatal,
        )

    logger.info("secrets_listed", count=len(names))
    return names


def fetch_current_value(context: BackupContext, name: str) -> SecretRecord:
    """Fetch the AWSCURRENT version of ``name``.

    Raises:
        SecretNotFoundError: the secret or its current version is gone
        AccessDeniedError: the value may not be read
        FetchError: anything else; severity decides whether the run continues
    """
    try:
        response = context.secrets_client.get_secret_value(
            SecretId=name,
            VersionStage=CURRENT_STAGE,
        )
    except (BotoCoreError, ClientError) as exc:
        error_cls = _FETCH_ERRORS.get(aws_error_code(exc), FetchError)
        raise error_cls.from_aws("Error fetching secret", exc, secret=name) from exc

    return _to_record(name, response)


def _to_record(name: str, response: dict[str, Any]) -> SecretRecord:
    payload = response.get("SecretString")
    if payload is None:
        payload = response.get("SecretBinary")
    if payload is None:
        raise SecretNotFoundError(
            "Secret has no retrievable value",
            {"secret": name},
        )

    version_id = response.get("VersionId")
    if not version_id:
        raise FetchError(
            "Secret value has no version id",
            {"secret": name},
            severity=Severity.ignorable,
        )

    return SecretRecord(
        name=response.get("Name") or name,
        version_id=version_id,
        payload=payload,
    )
