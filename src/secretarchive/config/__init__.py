"""
secretarchive configuration.

Pydantic-based settings read from SECRETARCHIVE_* environment variables,
the plain AWS_REGION / AWS_S3_BUCKET variables, and an optional .env file.
"""

from secretarchive.config.settings import (
    DEFAULT_MULTIPART_CHUNKSIZE,
    MIN_MULTIPART_CHUNKSIZE,
    Settings,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "DEFAULT_MULTIPART_CHUNKSIZE",
    "MIN_MULTIPART_CHUNKSIZE",
]
