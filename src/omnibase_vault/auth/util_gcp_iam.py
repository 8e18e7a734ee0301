# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Signed login JWTs for Vault's GCP auth method (``iam`` type).

Vault expects a JWT with ``sub`` set to the service account, ``aud`` set to
``vault/<role>`` and an ``exp`` at most 15 minutes ahead, signed by Google
on behalf of that service account. The signature comes from the IAM
Credentials ``signJwt`` endpoint, called with application default
credentials.
"""

from __future__ import annotations

import json
import logging
import time
from uuid import UUID

import google.auth
import google.auth.credentials
import google.auth.exceptions
import requests
from google.auth.transport.requests import AuthorizedSession

from omnibase_vault.enums import EnumInfraTransportType, EnumVaultAuthMethod
from omnibase_vault.errors import (
    ModelInfraErrorContext,
    ProtocolConfigurationError,
    VaultAuthError,
)
from omnibase_vault.models import ModelVaultFeatureSettings

logger = logging.getLogger(__name__)

IAM_CREDENTIALS_ENDPOINT: str = "https://iamcredentials.googleapis.com"
CLOUD_PLATFORM_SCOPE: str = "https://www.googleapis.com/auth/cloud-platform"
JWT_LIFETIME_SECONDS: int = 900


class GcpIamJwtSigner:
    """Signs Vault login JWTs through the IAM Credentials API.

    Credentials are resolved lazily with ``google.auth.default()`` on the
    first ``sign`` call unless given explicitly.
    """

    def __init__(
        self,
        credentials: google.auth.credentials.Credentials | None = None,
        session: requests.Session | None = None,
        endpoint: str = IAM_CREDENTIALS_ENDPOINT,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._credentials = credentials
        self._session = session
        self._endpoint = endpoint.rstrip("/")
        self._timeout_seconds = timeout_seconds

    def _authorized_session(self) -> requests.Session:
        if self._session is None:
            if self._credentials is None:
                self._credentials, _ = google.auth.default(
                    scopes=[CLOUD_PLATFORM_SCOPE]
                )
            self._session = AuthorizedSession(self._credentials)
        return self._session

    def service_account(self, settings: ModelVaultFeatureSettings) -> str:
        """Configured service account, else the one behind the credentials.

        Raises:
            ProtocolConfigurationError: If neither names a service account.
        """
        if settings.gcp_service_account:
            return settings.gcp_service_account
        self._authorized_session()
        email = getattr(self._credentials, "service_account_email", None)
        if isinstance(email, str) and "@" in email:
            return email
        raise ProtocolConfigurationError(
            "GCP IAM login requires gcp_service_account: the application "
            "default credentials are not bound to a service account",
            context=ModelInfraErrorContext(
                transport_type=EnumInfraTransportType.VAULT,
                operation="login",
                target_name=f"auth/{settings.auth_mount_path}",
            ),
        )

    def sign(
        self, settings: ModelVaultFeatureSettings, correlation_id: UUID | None = None
    ) -> str:
        """Signed JWT for ``settings.gcp_role``.

        Raises:
            ProtocolConfigurationError: If gcp_role or the service account
                is missing.
            VaultAuthError: If Google refused to sign or could not be reached.
        """
        context = ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.VAULT,
            operation="login",
            target_name=f"auth/{settings.auth_mount_path}",
            correlation_id=correlation_id,
        )
        if not settings.gcp_role:
            raise ProtocolConfigurationError(
                "GCP IAM login requires gcp_role", context=context
            )
        try:
            account = self.service_account(settings)
            claims = {
                "sub": account,
                "aud": f"vault/{settings.gcp_role}",
                "exp": int(time.time()) + JWT_LIFETIME_SECONDS,
            }
            response = self._authorized_session().post(
                f"{self._endpoint}/v1/projects/-/serviceAccounts/{account}:signJwt",
                json={"payload": json.dumps(claims)},
                timeout=self._timeout_seconds,
            )
            response.raise_for_status()
            body = response.json()
            signed = body.get("signedJwt") if isinstance(body, dict) else None
        except (
            google.auth.exceptions.GoogleAuthError,
            requests.exceptions.RequestException,
            ValueError,
        ) as e:
            raise VaultAuthError(
                "Cannot log in to HashiCorp Vault using "
                f"{EnumVaultAuthMethod.GCP_IAM.name} method: {e}",
                context=context,
            ) from e
        if not isinstance(signed, str) or not signed:
            raise VaultAuthError(
                "Failed to obtain a token from GCP services: signJwt returned "
                "no signedJwt",
                context=context,
            )
        logger.debug(
            "Signed Vault login JWT",
            extra={
                "service_account": account,
                "role": settings.gcp_role,
                "correlation_id": str(correlation_id) if correlation_id else None,
            },
        )
        return signed


__all__: list[str] = [
    "CLOUD_PLATFORM_SCOPE",
    "IAM_CREDENTIALS_ENDPOINT",
    "JWT_LIFETIME_SECONDS",
    "GcpIamJwtSigner",
]
