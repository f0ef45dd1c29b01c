"""
Unified error handling for secretarchive.

Every failure raised by the backup run is a SecretArchiveError carrying an
exit code and a severity. The severity is attached where the AWS call is
made (see classify_aws_error) so callers branch on a typed value instead of
matching error codes.

Exit Codes:
- 0: Success (individual secrets may have been skipped)
- 10: Configuration error
- 11: Provider error (Secrets Manager or S3 failure)
- 12: No secrets found
- 127: Unknown/internal error
- 130: Interrupted
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum, StrEnum
from typing import Any, Callable, TypeVar

import structlog
from botocore.exceptions import BotoCoreError, ClientError

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for the CLI."""

    SUCCESS = 0
    CONFIG_ERROR = 10
    PROVIDER_ERROR = 11
    NO_SECRETS = 12
    UNKNOWN_ERROR = 127


class Severity(StrEnum):
    """How the backup run reacts to a failed call."""

    fatal = "fatal"
    retryable = "retryable"
    ignorable = "ignorable"


IGNORABLE_CODES = frozenset(
    {
        "ResourceNotFoundException",
        "InvalidRequestException",
        "InvalidParameterException",
        "DecryptionFailure",
        "AccessDeniedException",
    }
)

RETRYABLE_CODES = frozenset(
    {
        "ThrottlingException",
        "Throttling",
        "TooManyRequestsException",
        "RequestLimitExceeded",
        "SlowDown",
        "InternalServiceError",
        "InternalServiceErrorException",
        "InternalError",
        "ServiceUnavailable",
        "RequestTimeout",
    }
)


def aws_error_code(exc: BaseException) -> str:
    """Return the AWS error code of a ClientError, or the exception type name."""
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code", "") or type(exc).__name__
    return type(exc).__name__


def classify_aws_error(exc: BaseException) -> Severity:
    """Classify a boto3 failure.

    Only ClientErrors can be ignorable or retryable. Anything raised below
    the API layer (missing credentials, unreachable endpoint) affects every
    subsequent call and is fatal.
    """
    if not isinstance(exc, ClientError):
        return Severity.fatal

    code = aws_error_code(exc)
    if code in IGNORABLE_CODES:
        return Severity.ignorable
    if code in RETRYABLE_CODES:
        return Severity.retryable

    status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)
    if status >= 500:
        return Severity.retryable
    return Severity.fatal


class SecretArchiveError(Exception):
    """Base exception for secretarchive errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    severity: Severity = Severity.fatal
    show_traceback: bool = False

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        *,
        severity: Severity | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if severity is not None:
            self.severity = severity

    @property
    def is_fatal(self) -> bool:
        return self.severity is Severity.fatal


class ConfigurationError(SecretArchiveError):
    """Raised for configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class ProviderError(SecretArchiveError):
    """Raised when Secrets Manager or S3 fails."""

    exit_code = ExitCode.PROVIDER_ERROR

    @classmethod
    def from_aws(
        cls,
        message: str,
        exc: BaseException,
        *,
        severity: Severity | None = None,
        **details: Any,
    ) -> "ProviderError":
        """Wrap a boto3 failure, recording its error code and severity.

        ``severity`` overrides the classification for call sites where any
        failure must abort the run.
        """
        details["error"] = aws_error_code(exc)
        return cls(message, details, severity=severity or classify_aws_error(exc))


class AuthorizationError(ProviderError):
    """Listing secrets was denied."""


class EmptyResultError(ProviderError):
    """Listing secrets returned nothing after full pagination."""

    exit_code = ExitCode.NO_SECRETS


class ListError(ProviderError):
    """Listing secrets or backup objects failed."""


class UploadError(ProviderError):
    """Writing a backup object failed."""


class FetchError(ProviderError):
    """Fetching the current value of a secret failed."""


class SecretNotFoundError(FetchError):
    """The secret, or its current version, does not exist."""

    severity = Severity.ignorable


class AccessDeniedError(FetchError):
    """Reading this secret's value was denied."""

    severity = Severity.ignorable


# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for CLI main functions that provides unified error handling.

    Catches exceptions and converts them to appropriate exit codes with
    consistent error reporting.

    Exit codes:
        - SecretArchiveError subclasses: Uses the error's exit_code
        - KeyboardInterrupt: Returns 130 (standard for SIGINT)
        - Other exceptions: Returns 127 (unknown error)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except SecretArchiveError as e:
                if log_errors:
                    logger.error(
                        "command_error",
                        error_type=type(e).__name__,
                        message=e.message,
                        severity=str(e.severity),
                        exit_code=int(e.exit_code),
                        **e.details,
                    )
                if e.show_traceback or show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted")
                return 130  # Standard exit code for SIGINT
            except (BotoCoreError, ClientError) as e:
                if log_errors:
                    logger.error(
                        "provider_error",
                        error_type=type(e).__name__,
                        error=aws_error_code(e),
                        exit_code=int(ExitCode.PROVIDER_ERROR),
                    )
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.PROVIDER_ERROR
            except Exception as e:
                if log_errors:
                    logger.error(
                        "unexpected_error",
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=int(ExitCode.UNKNOWN_ERROR),
                    )
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def format_error_message(error: SecretArchiveError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg
