"""
Application settings using Pydantic.

Provides environment-based configuration loading with SECRETARCHIVE_ prefix.
Region and bucket also honour the plain AWS_REGION and AWS_S3_BUCKET
variables so the job can run unchanged under existing schedulers.
"""

from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

MIB = 1024 * 1024
DEFAULT_MULTIPART_CHUNKSIZE = 64 * MIB
# S3 rejects multipart parts smaller than 5 MiB
MIN_MULTIPART_CHUNKSIZE = 5 * MIB


class Settings(BaseSettings):
    """Application settings."""

    # AWS
    aws_region: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SECRETARCHIVE_AWS_REGION", "AWS_REGION"),
    )

    # S3 destination
    s3_bucket: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SECRETARCHIVE_S3_BUCKET", "AWS_S3_BUCKET"),
    )
    s3_endpoint_url: str | None = None
    s3_force_path_style: bool = True

    # Uploads
    multipart_chunksize: int = DEFAULT_MULTIPART_CHUNKSIZE

    # Logging
    log_level: str = "INFO"

    @field_validator("multipart_chunksize")
    @classmethod
    def _check_chunksize(cls, value: int) -> int:
        if value < MIN_MULTIPART_CHUNKSIZE:
            raise ValueError(f"multipart_chunksize must be at least {MIN_MULTIPART_CHUNKSIZE} bytes")
        return value

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "SECRETARCHIVE_"
        populate_by_name = True
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
