"""Tests for secrets.py.

Tests for secret enumeration and current-value fetching.
"""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import EndpointConnectionError
from conftest import client_error

from secretarchive.core.errors import (
    AccessDeniedError,
    AuthorizationError,
    EmptyResultError,
    FetchError,
    ListError,
    SecretNotFoundError,
    Severity,
)
from secretarchive.secrets import (
    CURRENT_STAGE,
    fetch_current_value,
    iter_secret_names,
    list_secret_names,
)


class TestListSecretNames:
    """Tests for list_secret_names."""

    def test_returns_names_in_store_order(self, context, secrets_client):
        assert list_secret_names(context) == ["db-pass", "api-key"]

    def test_follows_pagination(self, context, secrets_client):
        secrets_client.secrets = {f"secret-{i}": (f"v{i}", "x") for i in range(5)}

        names = list_secret_names(context)

        assert names == [f"secret-{i}" for i in range(5)]

    def test_iter_is_lazy(self, context, secrets_client):
        listing = iter_secret_names(context)

        assert secrets_client.calls == []
        assert list(listing) == ["db-pass", "api-key"]

    def test_empty_account_is_fatal(self, context, secrets_client, s3_client):
        secrets_client.secrets = {}

        with pytest.raises(EmptyResultError) as exc_info:
            list_secret_names(context)

        assert exc_info.value.is_fatal
        assert s3_client.calls == []

    def test_access_denied_is_authorization_error(self, context, secrets_client):
        secrets_client.errors["list_secrets"] = client_error("AccessDeniedException", "ListSecrets")

        with pytest.raises(AuthorizationError) as exc_info:
            list_secret_names(context)

        assert exc_info.value.severity is Severity.fatal
        assert exc_info.value.details["error"] == "AccessDeniedException"

    def test_other_failures_are_list_errors(self, context, secrets_client):
        secrets_client.errors["list_secrets"] = EndpointConnectionError(
            endpoint_url="https://secretsmanager.eu-west-1.amazonaws.com"
        )

        with pytest.raises(ListError) as exc_info:
            list_secret_names(context)

        assert not isinstance(exc_info.value, AuthorizationError)
        assert exc_info.value.is_fatal


class TestFetchCurrentValue:
    """Tests for fetch_current_value."""

    def test_requests_current_stage(self, context, secrets_client):
        record = fetch_current_value(context, "db-pass")

        assert secrets_client.calls[-1] == (
            "get_secret_value",
            {"SecretId": "db-pass", "VersionStage": CURRENT_STAGE},
        )
        assert CURRENT_STAGE == "AWSCURRENT"
        assert record.name == "db-pass"
        assert record.version_id == "v1"
        assert record.payload == "hunter2"

    def test_binary_secret(self, context, secrets_client):
        secrets_client.secrets["cert"] = ("v9", b"\x30\x82")

        record = fetch_current_value(context, "cert")

        assert record.payload == b"\x30\x82"

    def test_not_found(self, context):
        with pytest.raises(SecretNotFoundError) as exc_info:
            fetch_current_value(context, "missing")

        assert exc_info.value.severity is Severity.ignorable
        assert exc_info.value.details["secret"] == "missing"

    def test_access_denied(self, context, secrets_client):
        secrets_client.value_errors["db-pass"] = client_error("AccessDeniedException")

        with pytest.raises(AccessDeniedError):
            fetch_current_value(context, "db-pass")

    def test_secret_without_value(self, context, secrets_client):
        secrets_client.secrets["empty"] = ("v1", None)

        with pytest.raises(SecretNotFoundError):
            fetch_current_value(context, "empty")

    def test_expired_credentials_are_fatal(self, context, secrets_client):
        secrets_client.value_errors["db-pass"] = client_error("ExpiredTokenException")

        with pytest.raises(FetchError) as exc_info:
            fetch_current_value(context, "db-pass")

        assert exc_info.value.is_fatal

    def test_response_without_version_is_ignorable(self, context):
        client = MagicMock()
        client.get_secret_value.return_value = {"Name": "odd", "SecretString": "x"}
        odd_context = context.__class__(
            secrets_client=client,
            s3_client=context.s3_client,
            bucket=context.bucket,
            transfer_config=context.transfer_config,
        )

        with pytest.raises(FetchError) as exc_info:
            fetch_current_value(odd_context, "odd")

        assert exc_info.value.severity is Severity.ignorable
