# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""GCP IAM authentication (service account signed JWT)."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from uuid import UUID, uuid4

from omnibase_vault.auth.auth_credentials import (
    CredentialsAuthentication,
    perform_login,
    token_from_login_response,
)
from omnibase_vault.auth.util_gcp_iam import GcpIamJwtSigner
from omnibase_vault.auth.util_login import login_failure, login_path
from omnibase_vault.enums import EnumInfraTransportType, EnumVaultAuthMethod
from omnibase_vault.errors import (
    ModelInfraErrorContext,
    ProtocolConfigurationError,
    VaultAuthError,
    VaultTransportError,
)
from omnibase_vault.models import ModelVaultFeatureSettings, ModelVaultToken
from omnibase_vault.transport import VaultTransport

logger = logging.getLogger(__name__)

LOOKUP_SELF_PATH: str = "auth/token/lookup-self"


class GcpIamAuthentication(CredentialsAuthentication):
    """Logs in with ``POST auth/<mount>/login`` and ``{role, jwt}``.

    The JWT is signed by Google for the configured service account. When
    the login response carries no accessor, it is read back with
    ``auth/token/lookup-self`` so the token can later be revoked by accessor.

    Example:
        >>> auth = GcpIamAuthentication(transport, settings)
        >>> token = auth.login()
    """

    def __init__(
        self,
        transport: VaultTransport,
        settings: ModelVaultFeatureSettings,
        signer: GcpIamJwtSigner | None = None,
    ) -> None:
        if settings.auth_method is not EnumVaultAuthMethod.GCP_IAM:
            raise ProtocolConfigurationError(
                f"GCP IAM authentication configured with auth_method="
                f"{settings.auth_method.value}"
            )
        super().__init__(transport, settings)
        self._signer = signer or GcpIamJwtSigner(
            timeout_seconds=settings.timeout_seconds
        )

    def login(self) -> ModelVaultToken:
        correlation_id = uuid4()
        path = login_path(self._settings)
        response = self._login(correlation_id)
        auth = response.get("auth")
        if not isinstance(auth, Mapping) or not auth.get("client_token"):
            raise VaultAuthError(
                "Failed to obtain a token from GCP services",
                context=self._context(path, correlation_id),
                path=path,
            )
        token = token_from_login_response(response, path, correlation_id)
        if token.accessor is None:
            token = token.model_copy(
                update={"accessor": self._lookup_accessor(token, correlation_id)}
            )
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
            self._transport,
            self._settings,
            correlation_id=correlation_id,
            signer=self._signer,
        )

    def _lookup_accessor(self, token: ModelVaultToken, correlation_id: UUID) -> str:
        try:
            response = self._transport.lookup_self(
                token.token, correlation_id=correlation_id
            )
        except (VaultAuthError, VaultTransportError) as e:
            failure = login_failure(
                e, self._settings, LOOKUP_SELF_PATH, correlation_id
            )
            if failure is e:
                raise
            raise failure from e

        data = response.get("data") if response else None
        if not isinstance(data, Mapping):
            raise VaultAuthError(
                "HashiCorp Vault hasn't returned an expected response from "
                f"{LOOKUP_SELF_PATH}",
                context=self._context(LOOKUP_SELF_PATH, correlation_id),
                path=LOOKUP_SELF_PATH,
            )
        accessor = data.get("accessor")
        if not isinstance(accessor, str) or not accessor:
            raise VaultAuthError(
                "HashiCorp Vault hasn't returned an 'accessor' parameter",
                context=self._context(LOOKUP_SELF_PATH, correlation_id),
                path=LOOKUP_SELF_PATH,
            )
        return accessor

    def _context(self, path: str, correlation_id: UUID) -> ModelInfraErrorContext:
        return ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.VAULT,
            operation="login",
            target_name=path,
            namespace=self._settings.vault_namespace,
            correlation_id=correlation_id,
        )


__all__: list[str] = ["GcpIamAuthentication", "LOOKUP_SELF_PATH"]
