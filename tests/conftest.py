"""Root test configuration."""

from __future__ import annotations

import logging
from typing import Any

import pytest
import structlog
from botocore.exceptions import ClientError

from secretarchive.context import BackupContext, build_transfer_config

PAGE_SIZE = 2


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def client_error(code: str, operation: str = "Operation", status: int = 400) -> ClientError:
    """Build a botocore ClientError with the given error code."""
    return ClientError(
        {
            "Error": {"Code": code, "Message": f"{code} raised"},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


class FakePaginator:
    """Splits a listing into pages of PAGE_SIZE items chained by NextToken."""

    def __init__(self, owner: Any, operation: str) -> None:
        self._owner = owner
        self._operation = operation

    def paginate(self, **params: Any):
        self._owner.calls.append((self._operation, params))
        error = self._owner.errors.get(self._operation)
        if error is not None:
            raise error
        result_key, items = self._owner.listing(self._operation, **params)
        if not items:
            yield {}
            return
        for start in range(0, len(items), PAGE_SIZE):
            page: dict[str, Any] = {result_key: items[start : start + PAGE_SIZE]}
            if start + PAGE_SIZE < len(items):
                page["NextToken"] = str(start + PAGE_SIZE)
            yield page


class FakeSecretsManager:
    """In-memory stand-in for the boto3 secretsmanager client."""

    def __init__(self, secrets: dict[str, tuple[str, Any]] | None = None) -> None:
        # name -> (version_id, value); bytes values are returned as SecretBinary
        self.secrets: dict[str, tuple[str, Any]] = dict(secrets or {})
        self.errors: dict[str, Exception] = {}
        self.value_errors: dict[str, Exception] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def get_paginator(self, operation: str) -> FakePaginator:
        return FakePaginator(self, operation)

    def listing(self, operation: str, **params: Any):
        assert operation == "list_secrets"
        return "SecretList", [{"Name": name} for name in self.secrets]

    def get_secret_value(self, **params: Any) -> dict[str, Any]:
        self.calls.append(("get_secret_value", params))
        name = params["SecretId"]
        if name in self.value_errors:
            raise self.value_errors[name]
        if name not in self.secrets:
            raise client_error("ResourceNotFoundException", "GetSecretValue")
        version_id, value = self.secrets[name]
        response: dict[str, Any] = {"Name": name, "VersionId": version_id}
        if isinstance(value, bytes):
            response["SecretBinary"] = value
        elif value is not None:
            response["SecretString"] = value
        return response


class FakeS3:
    """In-memory stand-in for the boto3 s3 client."""

    def __init__(self, objects: dict[str, bytes] | None = None) -> None:
        self.objects: dict[str, bytes] = dict(objects or {})
        self.errors: dict[str, Exception] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.uploads: list[str] = []

    def get_paginator(self, operation: str) -> FakePaginator:
        return FakePaginator(self, operation)

    def listing(self, operation: str, **params: Any):
        assert operation == "list_objects_v2"
        prefix = params.get("Prefix", "")
        keys = sorted(k for k in self.objects if k.startswith(prefix))
        return "Contents", [{"Key": key} for key in keys]

    def upload_fileobj(self, fileobj, bucket: str, key: str, Config=None) -> None:
        self.calls.append(("upload_fileobj", {"Bucket": bucket, "Key": key, "Config": Config}))
        error = self.errors.get("upload_fileobj")
        if error is not None:
            raise error
        self.uploads.append(key)
        self.objects[key] = fileobj.read()


@pytest.fixture
def secrets_client() -> FakeSecretsManager:
    return FakeSecretsManager(
        {
            "db-pass": ("v1", "hunter2"),
            "api-key": ("v2", '{"key": "abc123"}'),
        }
    )


@pytest.fixture
def s3_client() -> FakeS3:
    return FakeS3()


@pytest.fixture
def context(secrets_client, s3_client) -> BackupContext:
    return BackupContext(
        secrets_client=secrets_client,
        s3_client=s3_client,
        bucket="secret-backups",
        transfer_config=build_transfer_config(64 * 1024 * 1024),
    )
