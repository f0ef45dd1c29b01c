"""Core modules for secretarchive - centralized definitions and utilities."""

from secretarchive.core.errors import (
    AccessDeniedError,
    AuthorizationError,
    ConfigurationError,
    EmptyResultError,
    ExitCode,
    FetchError,
    ListError,
    ProviderError,
    SecretArchiveError,
    SecretNotFoundError,
    Severity,
    UploadError,
    classify_aws_error,
    format_error_message,
    main_with_error_handling,
)

__all__ = [
    "ExitCode",
    "Severity",
    "SecretArchiveError",
    "ConfigurationError",
    "ProviderError",
    "AuthorizationError",
    "EmptyResultError",
    "ListError",
    "UploadError",
    "FetchError",
    "SecretNotFoundError",
    "AccessDeniedError",
    "classify_aws_error",
    "main_with_error_handling",
    "format_error_message",
]
