# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Integration tests for VaultTransport using pytest-httpserver.

These tests run the real hvac adapter against a local HTTP server that
speaks the subset of the Vault API the broker uses.

Requirements:
    pytest-httpserver must be installed: pip install pytest-httpserver

Test Coverage:
    - 5xx retry then success, and exhaustion
    - Single-use unwrap of a wrapped login
    - Wrapped handoff followed by agent-side unwrap
    - Login, grouped read and revoke-on-destroy through the parameters resolver
    - GCP IAM login: signJwt, Vault login and accessor lookup
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

import pytest
import requests

# Skip entire module if pytest-httpserver is not installed
pytest.importorskip("pytest_httpserver")

from werkzeug import Response

from omnibase_vault.auth import (
    CubbyholeAuthentication,
    GcpIamAuthentication,
    GcpIamJwtSigner,
)
from omnibase_vault.enums import EnumVaultAuthMethod
from omnibase_vault.errors import VaultAuthError, VaultTransportError
from omnibase_vault.handoff import TokenHandoffProtocol
from omnibase_vault.models import ModelVaultFeatureSettings, ModelVaultRetryConfig
from omnibase_vault.resolver import RedactingLogFilter, VaultParametersResolver
from omnibase_vault.transport import VaultTransport
from tests.helpers.util_vault import (
    make_kv2_response,
    make_login_response,
    make_wrapped_response,
)

if TYPE_CHECKING:
    from pytest_httpserver import HTTPServer

pytestmark = [pytest.mark.integration]

LOGIN_BODY = {"role_id": "build-role", "secret_id": "s3cr3t-id"}


@pytest.fixture
def server_settings(
    httpserver: HTTPServer, fast_retry: ModelVaultRetryConfig
) -> ModelVaultFeatureSettings:
    return ModelVaultFeatureSettings(
        url=httpserver.url_for("/").rstrip("/"),
        role_id="build-role",
        secret_id=LOGIN_BODY["secret_id"],
        retry=fast_retry,
    )


@pytest.fixture
def transport(server_settings: ModelVaultFeatureSettings) -> Iterator[VaultTransport]:
    vault_transport = VaultTransport(server_settings)
    yield vault_transport
    vault_transport.close()


class TestRetry:
    def test_server_error_then_success(
        self, httpserver: HTTPServer, transport: VaultTransport
    ) -> None:
        httpserver.expect_oneshot_request("/v1/secret/app").respond_with_json(
            {"errors": ["Vault is sealed"]}, status=503
        )
        httpserver.expect_request(
            "/v1/secret/app", headers={"X-Vault-Token": "s.token"}
        ).respond_with_json({"data": {"value": "v"}})

        response = transport.read("secret/app", "s.token")

        assert response == {"data": {"value": "v"}}
        assert len(httpserver.log) == 2

    @pytest.mark.parametrize("status", [504, 505, 507])
    def test_unmapped_server_status_then_success(
        self, httpserver: HTTPServer, transport: VaultTransport, status: int
    ) -> None:
        httpserver.expect_oneshot_request("/v1/secret/app").respond_with_data(
            "", status=status
        )
        httpserver.expect_request("/v1/secret/app").respond_with_json(
            {"data": {"value": "v"}}
        )

        response = transport.read("/secret/app", "s.token")

        assert response == {"data": {"value": "v"}}
        assert len(httpserver.log) == 2

    def test_persistent_server_error(
        self, httpserver: HTTPServer, transport: VaultTransport
    ) -> None:
        httpserver.expect_request("/v1/secret/app").respond_with_json(
            {"errors": ["internal error"]}, status=500
        )

        with pytest.raises(VaultTransportError) as exc_info:
            transport.read("secret/app", "s.token")

        error = exc_info.value
        assert error.status_code == 500
        assert error.path == "secret/app"
        assert "internal error" in str(error)
        assert len(httpserver.log) == 3

    def test_client_error_not_retried(
        self, httpserver: HTTPServer, transport: VaultTransport
    ) -> None:
        httpserver.expect_request("/v1/secret/app").respond_with_json(
            {"errors": ["permission denied"]}, status=403
        )

        with pytest.raises(VaultAuthError):
            transport.read("secret/app", "s.token")

        assert len(httpserver.log) == 1


class TestWrappedHandoff:
    def test_wrapped_token_unwraps_once(
        self,
        httpserver: HTTPServer,
        server_settings: ModelVaultFeatureSettings,
        transport: VaultTransport,
    ) -> None:
        httpserver.expect_request(
            "/v1/auth/approle/login",
            method="POST",
            headers={"X-Vault-Wrap-TTL": "10m"},
            json=LOGIN_BODY,
        ).respond_with_json(make_wrapped_response(token="s.wrapping"))
        httpserver.expect_request(
            "/v1/auth/approle/login", method="POST", json=LOGIN_BODY
        ).respond_with_json(make_login_response(client_token="s.server"))
        httpserver.expect_request(
            "/v1/auth/token/revoke-self",
            method="POST",
            headers={"X-Vault-Token": "s.server"},
        ).respond_with_response(Response(status=204))
        httpserver.expect_oneshot_request(
            "/v1/sys/wrapping/unwrap",
            method="POST",
            headers={"X-Vault-Token": "s.wrapping"},
        ).respond_with_json(make_login_response(client_token="s.agent"))
        httpserver.expect_request("/v1/sys/wrapping/unwrap").respond_with_json(
            {"errors": ["wrapping token is not valid or does not exist"]}, status=400
        )

        with TokenHandoffProtocol() as handoff:
            envelope = handoff.request_wrapped_token(server_settings)

        assert envelope.accessor == "wrapped-accessor-1"

        token = CubbyholeAuthentication(transport, envelope.wrapped_token).login()
        assert token.token.get_secret_value() == "s.agent"

        with pytest.raises(VaultAuthError, match="already unwrapped"):
            transport.unwrap(envelope.wrapped_token)


class TestParametersResolution:
    def test_login_resolve_and_revoke(
        self,
        httpserver: HTTPServer,
        server_settings: ModelVaultFeatureSettings,
        transport: VaultTransport,
    ) -> None:
        httpserver.expect_request(
            "/v1/auth/approle/login", method="POST", json=LOGIN_BODY
        ).respond_with_json(make_login_response(client_token="s.session"))
        httpserver.expect_request(
            "/v1/secret/data/db",
            method="GET",
            headers={"X-Vault-Token": "s.session"},
        ).respond_with_json(make_kv2_response({"user": "alice", "password": "pw"}))
        httpserver.expect_request(
            "/v1/auth/token/revoke-self",
            method="POST",
            headers={"X-Vault-Token": "s.session"},
        ).respond_with_response(Response(status=204))

        redactor = RedactingLogFilter()
        resolver = VaultParametersResolver.from_settings(
            server_settings, redaction_sink=redactor, transport=transport
        )
        try:
            resolution = resolver.resolve_parameters(
                {
                    "db.user": "%vault:/secret/data/db!/user%",
                    "db.password": "%vault:/secret/data/db!/password%",
                }
            )
        finally:
            resolver.session_manager.destroy()

        assert resolution.parameters == {"db.user": "alice", "db.password": "pw"}
        assert redactor.secret_count == 2
        paths = [request.path for request, _ in httpserver.log]
        assert paths == [
            "/v1/auth/approle/login",
            "/v1/secret/data/db",
            "/v1/auth/token/revoke-self",
        ]


class TestGcpIamLogin:
    def test_signed_jwt_login_and_accessor_lookup(
        self,
        httpserver: HTTPServer,
        server_settings: ModelVaultFeatureSettings,
        transport: VaultTransport,
    ) -> None:
        account = "ci@build-project.iam.gserviceaccount.com"
        settings = server_settings.model_copy(
            update={
                "auth_method": EnumVaultAuthMethod.GCP_IAM,
                "auth_mount_path": "gcp",
                "gcp_role": "ci",
                "gcp_service_account": account,
            }
        )
        httpserver.expect_request(
            f"/v1/projects/-/serviceAccounts/{account}:signJwt", method="POST"
        ).respond_with_json({"keyId": "key-1", "signedJwt": "signed.jwt.value"})
        login = make_login_response(client_token="s.gcp-token")
        del login["auth"]["accessor"]  # type: ignore[attr-defined]
        httpserver.expect_request(
            "/v1/auth/gcp/login",
            method="POST",
            json={"role": "ci", "jwt": "signed.jwt.value"},
        ).respond_with_json(login)
        httpserver.expect_request(
            "/v1/auth/token/lookup-self",
            method="GET",
            headers={"X-Vault-Token": "s.gcp-token"},
        ).respond_with_json({"data": {"accessor": "gcp-accessor"}})

        with requests.Session() as google_session:
            signer = GcpIamJwtSigner(
                session=google_session, endpoint=httpserver.url_for("/")
            )
            token = GcpIamAuthentication(transport, settings, signer).login()

        assert token.token.get_secret_value() == "s.gcp-token"
        assert token.accessor == "gcp-accessor"
