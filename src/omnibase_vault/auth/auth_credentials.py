# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Login exchange shared by the AppRole, LDAP and GCP IAM methods."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from uuid import UUID, uuid4

from omnibase_vault.auth.util_gcp_iam import GcpIamJwtSigner
from omnibase_vault.auth.util_login import (
    build_login_request,
    login_failure,
    login_path,
)
from omnibase_vault.enums import EnumInfraTransportType, EnumVaultAuthMethod
from omnibase_vault.errors import (
    ModelInfraErrorContext,
    VaultAuthError,
    VaultTransportError,
)
from omnibase_vault.models import ModelVaultFeatureSettings, ModelVaultToken
from omnibase_vault.transport import VaultTransport

logger = logging.getLogger(__name__)


def perform_login(
    transport: VaultTransport,
    settings: ModelVaultFeatureSettings,
    wrap_ttl: str | None = None,
    correlation_id: UUID | None = None,
    signer: GcpIamJwtSigner | None = None,
) -> dict[str, object]:
    """POST the configured credentials and return the raw login response.

    Unwrapped logins are retried on 5xx per the transport policy. Wrapped
    logins are sent once. The GCP IAM method first has ``signer`` (or a
    signer on application default credentials) produce the login JWT.

    Raises:
        VaultAuthError: If Vault rejected the credentials.
        VaultTransportError: If Vault could not be reached.
        ProtocolConfigurationError: If credentials are missing.
    """
    correlation_id = correlation_id or uuid4()
    jwt = None
    if settings.auth_method is EnumVaultAuthMethod.GCP_IAM:
        signer = signer or GcpIamJwtSigner(timeout_seconds=settings.timeout_seconds)
        jwt = signer.sign(settings, correlation_id)
    path, body = build_login_request(settings, jwt=jwt)
    try:
        return transport.login(
            path,
            body,
            wrap_ttl=wrap_ttl,
            retry=wrap_ttl is None,
            correlation_id=correlation_id,
        )
    except (VaultAuthError, VaultTransportError) as e:
        failure = login_failure(e, settings, path, correlation_id)
        if failure is e:
            raise
        raise failure from e


def token_from_login_response(
    response: Mapping[str, object],
    path: str,
    correlation_id: UUID | None = None,
) -> ModelVaultToken:
    """Extract the token from the ``auth`` block of a login response.

    Raises:
        VaultAuthError: If the response carries no usable ``auth`` block.
    """
    auth = response.get("auth")
    if isinstance(auth, Mapping):
        try:
            return ModelVaultToken.from_auth(auth)
        except ValueError:
            pass
    raise VaultAuthError(
        "HashiCorp Vault hasn't returned 'auth' section with a client token",
        context=ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.VAULT,
            operation="login",
            target_name=path,
            correlation_id=correlation_id,
        ),
        path=path,
    )


class CredentialsAuthentication:
    """One login exchange with the credential pair held in settings."""

    def __init__(
        self, transport: VaultTransport, settings: ModelVaultFeatureSettings
    ) -> None:
        self._transport = transport
        self._settings = settings

    def login(self) -> ModelVaultToken:
        correlation_id = uuid4()
        path = login_path(self._settings)
        response = self._login(correlation_id)
        token = token_from_login_response(response, path, correlation_id)
        logger.debug(
            "Logged in to Vault using %s method",
            self._settings.auth_method.name,
            extra={
                "mount_path": self._settings.auth_mount_path,
                "token": token.describe(),
                "correlation_id": str(correlation_id),
            },
        )
        return token

    def _login(self, correlation_id: UUID) -> dict[str, object]:
        return perform_login(
            self._transport, self._settings, correlation_id=correlation_id
        )


__all__: list[str] = [
    "CredentialsAuthentication",
    "perform_login",
    "token_from_login_response",
]
