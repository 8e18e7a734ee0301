# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Synchronous Vault transport built on the hvac adapter.

Only the subset of the Vault HTTP API needed by the broker is exposed:
login, token renew / revoke, generic read / write, unwrap and health.

Security Features:
    - The hvac client is created without a token; every call passes the
      token it needs explicitly, so no ambient VAULT_TOKEN leaks into
      unauthenticated calls such as login
    - Error messages carry paths and Vault's own error text, never tokens
    - SSL verification enabled by default (CA bundle path supported)

Retry Logic:
    - The adapter is called with raise_exception=False and the decision is
      made on the response status, so every 5xx code is retried, including
      those hvac has no exception class for
    - Retries only 5xx responses and transport-level I/O failures
    - 4xx responses are caller errors and surface immediately
    - Backoff: initial_backoff * (exponential_base ** retry), capped at
      max_backoff_seconds
    - Exhausting attempts raises VaultTransportError annotated with the
      request path and the message from the response ``errors`` array
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from uuid import UUID, uuid4

import hvac
import requests
from pydantic import SecretStr

from omnibase_vault.enums import EnumInfraTransportType
from omnibase_vault.errors import (
    ModelInfraErrorContext,
    VaultAuthError,
    VaultNotFoundError,
    VaultTransportError,
)
from omnibase_vault.models import (
    ModelRetryState,
    ModelVaultFeatureSettings,
    ModelVaultHealth,
)
from omnibase_vault.transport.util_vault_errors import (
    extract_vault_error_message,
    format_status_message,
    is_server_error,
)

logger = logging.getLogger(__name__)

HEADER_VAULT_TOKEN: str = "X-Vault-Token"
HEADER_WRAP_TTL: str = "X-Vault-Wrap-TTL"
API_PREFIX: str = "/v1/"

# sys/health answers standby, DR, perf-standby, uninitialized and sealed
# servers with these codes and a regular health document
HEALTH_DOCUMENT_STATUSES: frozenset[int] = frozenset({429, 472, 473, 501, 503})

VaultResponse = dict[str, object]


class VaultTransport:
    """Blocking request/response primitive against one Vault endpoint.

    Thread Safety:
        hvac's adapter wraps a requests.Session, which is safe for the
        concurrent GET/POST calls issued by the resolver's worker pool.
        Per-request headers are built fresh for every attempt.
    """

    def __init__(
        self,
        settings: ModelVaultFeatureSettings,
        client: hvac.Client | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            settings: Connection settings (URL, namespace, TLS, retry policy)
            client: Pre-built hvac client, mainly for tests
        """
        self._settings = settings
        self._client = client if client is not None else self._create_hvac_client()
        # hvac falls back to VAULT_TOKEN / ~/.vault-token; tokens are per call here
        self._client.token = None

    def _create_hvac_client(self) -> hvac.Client:
        return hvac.Client(
            url=self._settings.url,
            namespace=self._settings.vault_namespace,
            verify=self._settings.tls_verify,
            timeout=self._settings.timeout_seconds,
        )

    @property
    def settings(self) -> ModelVaultFeatureSettings:
        return self._settings

    def close(self) -> None:
        """Release the underlying HTTP session."""
        self._client.adapter.close()

    # -------------------------------------------------------------------------
    # Vault API subset
    # -------------------------------------------------------------------------

    def read(
        self,
        path: str,
        token: SecretStr | str,
        correlation_id: UUID | None = None,
    ) -> VaultResponse | None:
        """GET a secret path. Idempotent, so it is retried."""
        return self.request(
            "get", path, token=token, operation="read", correlation_id=correlation_id
        )

    def write(
        self,
        path: str,
        token: SecretStr | str,
        body: Mapping[str, object] | None = None,
        correlation_id: UUID | None = None,
    ) -> VaultResponse | None:
        """POST to a path (dynamic secrets). Not idempotent, never retried."""
        return self.request(
            "post",
            path,
            token=token,
            json=dict(body or {}),
            retry=False,
            operation="write",
            correlation_id=correlation_id,
        )

    def login(
        self,
        path: str,
        body: Mapping[str, object],
        wrap_ttl: str | None = None,
        retry: bool = True,
        correlation_id: UUID | None = None,
    ) -> VaultResponse:
        """POST credentials to ``auth/<mount>/login[...]``.

        Raises:
            VaultTransportError: If Vault answered with an empty body.
        """
        response = self.request(
            "post",
            path,
            json=dict(body),
            wrap_ttl=wrap_ttl,
            retry=retry,
            operation="login",
            correlation_id=correlation_id,
        )
        if not response:
            raise VaultTransportError(
                f"HashiCorp Vault hasn't returned anything from POST to '{path}'",
                context=self._create_error_context("login", path, correlation_id),
                path=path,
            )
        return response

    def renew_self(
        self, token: SecretStr | str, correlation_id: UUID | None = None
    ) -> VaultResponse | None:
        """Single attempt at ``auth/token/renew-self``."""
        return self.request(
            "post",
            "auth/token/renew-self",
            token=token,
            retry=False,
            operation="renew_token",
            correlation_id=correlation_id,
        )

    def lookup_self(
        self, token: SecretStr | str, correlation_id: UUID | None = None
    ) -> VaultResponse | None:
        """``GET auth/token/lookup-self``, retried like any read."""
        return self.request(
            "get",
            "auth/token/lookup-self",
            token=token,
            operation="lookup_token",
            correlation_id=correlation_id,
        )

    def revoke_self(
        self, token: SecretStr | str, correlation_id: UUID | None = None
    ) -> None:
        """Single attempt at ``auth/token/revoke-self``."""
        self.request(
            "post",
            "auth/token/revoke-self",
            token=token,
            retry=False,
            operation="revoke_token",
            correlation_id=correlation_id,
        )

    def revoke_accessor(
        self,
        token: SecretStr | str,
        accessor: str,
        correlation_id: UUID | None = None,
    ) -> None:
        """Revoke another token through its accessor."""
        self.request(
            "post",
            "auth/token/revoke-accessor",
            token=token,
            json={"accessor": accessor},
            retry=False,
            operation="revoke_accessor",
            correlation_id=correlation_id,
        )

    def unwrap(
        self, wrapping_token: SecretStr | str, correlation_id: UUID | None = None
    ) -> VaultResponse:
        """Consume a response-wrapping token.

        Vault allows this exactly once per wrapping token, so it is never
        retried.

        Raises:
            VaultAuthError: If the wrapping token was already used or expired.
        """
        path = "sys/wrapping/unwrap"
        try:
            response = self.request(
                "post",
                path,
                token=wrapping_token,
                retry=False,
                operation="unwrap",
                correlation_id=correlation_id,
            )
        except VaultTransportError as e:
            if e.status_code == 400:
                raise VaultAuthError(
                    "Wrapped token was already unwrapped or has expired: "
                    f"{e.vault_message or 'wrapping token is not valid'}",
                    context=self._create_error_context("unwrap", path, correlation_id),
                    path=path,
                    status_code=e.status_code,
                    vault_message=e.vault_message,
                ) from e
            raise
        if not response:
            raise VaultAuthError(
                "HashiCorp Vault returned an empty unwrap response",
                context=self._create_error_context("unwrap", path, correlation_id),
                path=path,
            )
        return response

    def health(self, correlation_id: UUID | None = None) -> ModelVaultHealth:
        """``GET sys/health``.

        Standby, sealed and uninitialized servers answer with non-2xx codes
        that still carry a health document; those codes are not errors.
        """
        correlation_id = correlation_id or uuid4()

        def health_func() -> object:
            return self._client.adapter.request(
                "get", f"{API_PREFIX}sys/health", raise_exception=False
            )

        raw = self._execute_with_retry(
            "health",
            "sys/health",
            health_func,
            correlation_id,
            retry=True,
            accepted_statuses=HEALTH_DOCUMENT_STATUSES,
        )
        return ModelVaultHealth.model_validate(self._as_mapping(raw) or {})

    # -------------------------------------------------------------------------
    # Generic request with retry
    # -------------------------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        token: SecretStr | str | None = None,
        json: Mapping[str, object] | None = None,
        wrap_ttl: str | None = None,
        retry: bool = True,
        operation: str | None = None,
        correlation_id: UUID | None = None,
    ) -> VaultResponse | None:
        """Issue one Vault request under the retry policy.

        Args:
            method: HTTP method ("get" or "post")
            path: Vault API path relative to ``/v1/``
            token: Token for the X-Vault-Token header
            json: JSON body
            wrap_ttl: Ask Vault to wrap the response with this TTL
            retry: False for calls that must not be repeated
            operation: Operation name for logs and error context
            correlation_id: Correlation ID for tracing

        Returns:
            Parsed JSON body, or None for empty (204) responses

        Raises:
            VaultAuthError: 401 / 403
            VaultNotFoundError: 404
            VaultTransportError: Other 4xx, or 5xx / I/O after retries
        """
        correlation_id = correlation_id or uuid4()
        normalized = path.lstrip("/")
        headers: dict[str, str] = {}
        if token is not None:
            headers[HEADER_VAULT_TOKEN] = (
                token.get_secret_value() if isinstance(token, SecretStr) else token
            )
        if wrap_ttl:
            headers[HEADER_WRAP_TTL] = wrap_ttl

        def request_func() -> object:
            # hvac mutates the headers it is given
            return self._client.adapter.request(
                method,
                f"{API_PREFIX}{normalized}",
                headers=dict(headers),
                json=json,
                raise_exception=False,
            )

        raw = self._execute_with_retry(
            operation or method, normalized, request_func, correlation_id, retry
        )
        return self._as_mapping(raw)

    def _execute_with_retry(
        self,
        operation: str,
        path: str,
        func: Callable[[], object],
        correlation_id: UUID,
        retry: bool,
        accepted_statuses: frozenset[int] = frozenset(),
    ) -> object:
        retry_config = self._settings.retry
        retry_state = ModelRetryState(
            attempt=0,
            max_attempts=retry_config.max_attempts if retry else 1,
            delay_seconds=retry_config.initial_backoff_seconds,
            backoff_multiplier=retry_config.exponential_base,
        )

        while True:
            try:
                raw = func()
            except requests.exceptions.RequestException as e:
                retry_state = retry_state.next_attempt(
                    error_message=f"{type(e).__name__} on {path}",
                    max_delay_seconds=retry_config.max_backoff_seconds,
                )
                if not retry_state.is_retriable():
                    raise VaultTransportError(
                        f"Vault request to {path} failed: {type(e).__name__}",
                        context=self._create_error_context(
                            operation, path, correlation_id
                        ),
                        path=path,
                        retry_count=retry_state.attempt,
                    ) from e
            else:
                if (
                    not isinstance(raw, requests.Response)
                    or raw.ok
                    or raw.status_code in accepted_statuses
                ):
                    return raw
                status = raw.status_code
                message = extract_vault_error_message(raw)
                if not is_server_error(status):
                    raise self._translate_client_error(
                        status, message, operation, path, correlation_id
                    )
                retry_state = retry_state.next_attempt(
                    error_message=format_status_message(status, path, message),
                    max_delay_seconds=retry_config.max_backoff_seconds,
                )
                if not retry_state.is_retriable():
                    raise VaultTransportError(
                        format_status_message(status, path, message),
                        context=self._create_error_context(
                            operation, path, correlation_id
                        ),
                        path=path,
                        status_code=status,
                        vault_message=message,
                        retry_count=retry_state.attempt,
                    )

            self._log_retry_attempt(retry_state, operation, path, correlation_id)
            time.sleep(retry_state.delay_seconds)

    def _translate_client_error(
        self,
        status: int,
        message: str,
        operation: str,
        path: str,
        correlation_id: UUID,
    ) -> VaultTransportError | VaultAuthError | VaultNotFoundError:
        ctx = self._create_error_context(operation, path, correlation_id)
        text = format_status_message(status, path, message)
        if status in (401, 403):
            return VaultAuthError(
                text,
                context=ctx,
                path=path,
                status_code=status,
                vault_message=message,
            )
        if status == 404:
            return VaultNotFoundError(
                text, context=ctx, path=path, vault_message=message
            )
        return VaultTransportError(
            text,
            context=ctx,
            path=path,
            status_code=status,
            vault_message=message,
        )

    def _create_error_context(
        self, operation: str, path: str, correlation_id: UUID | None
    ) -> ModelInfraErrorContext:
        return ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.VAULT,
            operation=operation,
            target_name=path,
            namespace=self._settings.vault_namespace,
            correlation_id=correlation_id,
        )

    def _log_retry_attempt(
        self,
        retry_state: ModelRetryState,
        operation: str,
        path: str,
        correlation_id: UUID,
    ) -> None:
        logger.warning(
            "Attempt %d for %s has failed, retrying",
            retry_state.attempt,
            operation,
            extra={
                "operation": operation,
                "path": path,
                "attempt": retry_state.attempt,
                "max_attempts": retry_state.max_attempts,
                "backoff_seconds": retry_state.delay_seconds,
                "last_error": retry_state.last_error,
                "correlation_id": str(correlation_id),
            },
        )

    @staticmethod
    def _as_mapping(raw: object) -> VaultResponse | None:
        """Normalize what hvac's JSON adapter returns.

        The adapter returns a dict for JSON bodies and the raw
        ``requests.Response`` for empty or non-JSON bodies.
        """
        if raw is None:
            return None
        if isinstance(raw, dict):
            return raw
        if isinstance(raw, requests.Response):
            if raw.status_code == 204 or not raw.content:
                return None
            try:
                parsed = raw.json()
            except ValueError:
                return None
            return parsed if isinstance(parsed, dict) else None
        return None


__all__: list[str] = [
    "HEADER_VAULT_TOKEN",
    "HEADER_WRAP_TTL",
    "HEALTH_DOCUMENT_STATUSES",
    "VaultTransport",
]
