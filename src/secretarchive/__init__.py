"""secretarchive: back up AWS Secrets Manager secrets to S3."""

__version__ = "0.1.0"
