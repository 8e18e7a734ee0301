# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Server-side token handoff.

The privileged side holds the long-term AppRole, LDAP or GCP IAM credentials. It logs in
on behalf of an agent and hands over only a response-wrapped token plus the
accessor of the token inside it. The agent unwraps the envelope exactly once
(see CubbyholeAuthentication). The privileged side can later revoke the
agent's token through the accessor without ever knowing the token value.

Handoff Flow:
    1. Plain login with the long-term credentials (retried on 5xx). This
       validates the credentials and yields a server token.
    2. The same login again with X-Vault-Wrap-TTL (single attempt).
    3. Best-effort revoke-self of the server token from step 1.

Revocation Semantics:
    - Accessor path: fresh server login, revoke-accessor, then revoke-self of
      that server token (backoff 1s, 3s, 6s)
    - revoke-accessor 403 means the role lacks the policy and 400 means the
      token is already gone; both are logged and treated as done
    - Token path: revoke-self with the leased token; a token the server no
      longer knows counts as revoked
    - Revocation never raises; it returns whether it succeeded
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from uuid import UUID, uuid4

from pydantic import SecretStr

from omnibase_vault.auth import GcpIamJwtSigner, login_path, perform_login
from omnibase_vault.enums import EnumInfraTransportType, EnumVaultAuthMethod
from omnibase_vault.errors import (
    ModelInfraErrorContext,
    RuntimeHostError,
    VaultAuthError,
    VaultTransportError,
)
from omnibase_vault.models import (
    ModelLeasedTokenInfo,
    ModelVaultFeatureSettings,
    ModelWrappedTokenEnvelope,
)
from omnibase_vault.transport import VaultTransport

logger = logging.getLogger(__name__)

REVOKE_SELF_BACKOFF_SECONDS: tuple[float, ...] = (1.0, 3.0, 6.0)


class TokenHandoffProtocol:
    """Issues and revokes agent tokens with the server's own credentials.

    Thread Safety:
        Stateless apart from the revocation worker pool. Each operation
        creates its own transport from the settings it is given.
    """

    def __init__(
        self,
        transport_factory: Callable[
            [ModelVaultFeatureSettings], VaultTransport
        ] = VaultTransport,
        max_workers: int = 2,
        revoke_backoff_seconds: tuple[float, ...] = REVOKE_SELF_BACKOFF_SECONDS,
        gcp_signer: GcpIamJwtSigner | None = None,
    ) -> None:
        """Initialize the handoff.

        Args:
            transport_factory: Builds a transport for a connection's settings
            max_workers: Threads for background revocation
            revoke_backoff_seconds: Delays between revoke-self attempts of
                the server token
            gcp_signer: Signs login JWTs for GCP IAM connections, defaults
                to application default credentials
        """
        self._transport_factory = transport_factory
        self._revoke_backoff_seconds = revoke_backoff_seconds
        self._gcp_signer = gcp_signer
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="vault-token-revoke",
        )

    def close(self, wait: bool = True) -> None:
        """Shut down the background revocation pool."""
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> TokenHandoffProtocol:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Issue
    # -------------------------------------------------------------------------

    def request_wrapped_token(
        self, settings: ModelVaultFeatureSettings
    ) -> ModelWrappedTokenEnvelope:
        """Log in for an agent and return the single-use wrapped envelope.

        Raises:
            VaultAuthError: If Vault rejected the credentials or returned no
                ``wrap_info``.
            VaultTransportError: If Vault could not be reached.
        """
        correlation_id = uuid4()
        path = login_path(settings)
        transport = self._transport_factory(settings)
        try:
            server_login = self._login(transport, settings, correlation_id)
            wrapped = self._login(
                transport, settings, correlation_id, wrap_ttl=settings.wrap_ttl
            )
            envelope = self._extract_wrapped(wrapped, path, correlation_id)

            server_token = self._client_token(server_login)
            if server_token is not None:
                try:
                    transport.revoke_self(server_token, correlation_id=correlation_id)
                except RuntimeHostError as e:
                    logger.warning(
                        "Cannot revoke Vault server token after wrapping: %s",
                        e,
                        extra={"correlation_id": str(correlation_id)},
                    )
        finally:
            transport.close()

        logger.info(
            "Issued wrapped Vault token",
            extra={
                "auth_method": settings.auth_method.value,
                "accessor": envelope.accessor,
                "wrap_ttl": settings.wrap_ttl,
                "correlation_id": str(correlation_id),
            },
        )
        return envelope

    def request_token(
        self, settings: ModelVaultFeatureSettings
    ) -> ModelLeasedTokenInfo:
        """Log in and return the plain token with its accessor.

        Raises:
            VaultAuthError: If Vault rejected the credentials or returned no
                token or accessor.
            VaultTransportError: If Vault could not be reached.
        """
        correlation_id = uuid4()
        path = login_path(settings)
        transport = self._transport_factory(settings)
        try:
            response = self._login(transport, settings, correlation_id)
        finally:
            transport.close()

        auth = response.get("auth")
        token = self._client_token(response)
        accessor = auth.get("accessor") if isinstance(auth, Mapping) else None
        if token is None:
            raise self._missing("token", path, correlation_id)
        if not isinstance(accessor, str) or not accessor:
            raise self._missing("token accessor", path, correlation_id)
        return ModelLeasedTokenInfo(
            token=SecretStr(token), accessor=accessor, settings=settings
        )

    def _login(
        self,
        transport: VaultTransport,
        settings: ModelVaultFeatureSettings,
        correlation_id: UUID,
        wrap_ttl: str | None = None,
    ) -> dict[str, object]:
        return perform_login(
            transport,
            settings,
            wrap_ttl=wrap_ttl,
            correlation_id=correlation_id,
            signer=self._gcp_signer,
        )

    # -------------------------------------------------------------------------
    # Revoke
    # -------------------------------------------------------------------------

    def revoke(
        self, info: ModelLeasedTokenInfo, background: bool = False
    ) -> bool | Future[bool]:
        """Revoke a token issued by this handoff.

        Args:
            info: Token (or accessor) plus the connection it was issued on
            background: Run on the revocation pool and return a Future

        Returns:
            True if the token is revoked or nothing more can be done, False
            if revocation failed and may be worth retrying later. A Future
            of that value when ``background`` is set.
        """
        if background:
            return self._executor.submit(self._revoke, info)
        return self._revoke(info)

    def _revoke(self, info: ModelLeasedTokenInfo) -> bool:
        correlation_id = uuid4()
        try:
            if info.token is None:
                return self._revoke_by_accessor(info, correlation_id)
            return self._revoke_leased_token(info, info.token, correlation_id)
        except RuntimeHostError as e:
            logger.warning(
                "Failed to revoke Vault token: %s",
                e,
                extra={
                    "accessor": info.accessor,
                    "error_type": type(e).__name__,
                    "correlation_id": str(correlation_id),
                },
            )
            return False

    def _revoke_by_accessor(
        self, info: ModelLeasedTokenInfo, correlation_id: UUID
    ) -> bool:
        settings = info.settings
        transport = self._transport_factory(settings)
        try:
            response = self._login(transport, settings, correlation_id)
            server_token = self._client_token(response)
            if server_token is None:
                raise self._missing(
                    "token", login_path(settings), correlation_id
                )
            try:
                return self._revoke_accessor(
                    transport, server_token, info.accessor, settings, correlation_id
                )
            finally:
                self._revoke_self_with_backoff(transport, server_token, correlation_id)
        finally:
            transport.close()

    def _revoke_accessor(
        self,
        transport: VaultTransport,
        server_token: str,
        accessor: str,
        settings: ModelVaultFeatureSettings,
        correlation_id: UUID,
    ) -> bool:
        extra = {"accessor": accessor, "correlation_id": str(correlation_id)}
        try:
            transport.revoke_accessor(
                server_token, accessor, correlation_id=correlation_id
            )
        except VaultAuthError as e:
            if e.status_code != 403:
                raise
            if settings.auth_method is EnumVaultAuthMethod.APPROLE:
                hint = (
                    f"give approle '{settings.role_id}' 'update' access to "
                    "'/auth/token/revoke-accessor'"
                )
            elif settings.auth_method is EnumVaultAuthMethod.GCP_IAM:
                hint = (
                    f"give GCP role '{settings.gcp_role}' access to "
                    "'/auth/token/revoke-accessor'"
                )
            else:
                hint = "give LDAP role access to '/auth/token/revoke-accessor'"
            logger.warning(
                "Failed to revoke token via accessor '%s': access denied, %s%s",
                accessor,
                hint,
                self._suffix(e.vault_message),
                extra=extra,
            )
            return True
        except VaultTransportError as e:
            if e.status_code != 400:
                raise
            message = (
                f"Failed to revoke token via accessor '{accessor}': server "
                "returned 400, most probably token was already revoked"
                f"{self._suffix(e.vault_message)}"
            )
            if e.vault_message and "invalid accessor" in e.vault_message:
                logger.info(message, extra=extra)
            else:
                logger.warning(message, extra=extra)
            return True

        logger.info("Revoked Vault token via accessor", extra=extra)
        return True

    def _revoke_self_with_backoff(
        self, transport: VaultTransport, token: str, correlation_id: UUID
    ) -> bool:
        delays = (*self._revoke_backoff_seconds, None)
        last_error: RuntimeHostError | None = None
        for delay in delays:
            try:
                transport.revoke_self(token, correlation_id=correlation_id)
                return True
            except RuntimeHostError as e:
                last_error = e
                if delay is not None:
                    time.sleep(delay)
        logger.warning(
            "Cannot revoke HashiCorp Vault token: %s",
            last_error,
            extra={"correlation_id": str(correlation_id)},
        )
        return False

    def _revoke_leased_token(
        self,
        info: ModelLeasedTokenInfo,
        token: SecretStr,
        correlation_id: UUID,
    ) -> bool:
        transport = self._transport_factory(info.settings)
        try:
            transport.revoke_self(token, correlation_id=correlation_id)
        except (VaultAuthError, VaultTransportError) as e:
            status = e.status_code
            if status is None or status >= 500:
                raise
            # 4xx on revoke-self: the server no longer knows the token
            logger.info(
                "Vault token was already invalid, nothing to revoke",
                extra={
                    "accessor": info.accessor,
                    "status_code": status,
                    "correlation_id": str(correlation_id),
                },
            )
            return True
        finally:
            transport.close()
        logger.info(
            "Revoked leased Vault token",
            extra={"accessor": info.accessor, "correlation_id": str(correlation_id)},
        )
        return True

    # -------------------------------------------------------------------------
    # Response helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _client_token(response: Mapping[str, object]) -> str | None:
        auth = response.get("auth")
        if not isinstance(auth, Mapping):
            return None
        token = auth.get("client_token")
        return token if isinstance(token, str) and token else None

    def _extract_wrapped(
        self,
        response: Mapping[str, object],
        path: str,
        correlation_id: UUID,
    ) -> ModelWrappedTokenEnvelope:
        wrap_info = response.get("wrap_info")
        if not isinstance(wrap_info, Mapping):
            raise self._missing("'wrap_info'", path, correlation_id)
        token = wrap_info.get("token")
        accessor = wrap_info.get("wrapped_accessor")
        if not isinstance(token, str) or not token:
            raise self._missing("wrapped token", path, correlation_id)
        if not isinstance(accessor, str) or not accessor:
            raise self._missing("wrapped token accessor", path, correlation_id)
        ttl = wrap_info.get("ttl")
        return ModelWrappedTokenEnvelope(
            wrapped_token=SecretStr(token),
            accessor=accessor,
            ttl_seconds=int(ttl) if isinstance(ttl, int) else None,
        )

    @staticmethod
    def _missing(what: str, path: str, correlation_id: UUID) -> VaultAuthError:
        return VaultAuthError(
            f"HashiCorp Vault hasn't returned {what}",
            context=ModelInfraErrorContext(
                transport_type=EnumInfraTransportType.VAULT,
                operation="login",
                target_name=path,
                correlation_id=correlation_id,
            ),
            path=path,
        )

    @staticmethod
    def _suffix(vault_message: str | None) -> str:
        if not vault_message:
            return ""
        return ". Error message: " + vault_message.replace("\n", " ")


__all__: list[str] = ["REVOKE_SELF_BACKOFF_SECONDS", "TokenHandoffProtocol"]
