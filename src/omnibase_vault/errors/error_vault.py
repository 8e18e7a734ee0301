# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Vault-Specific Infrastructure Error Classes.

Taxonomy:
    VaultTransportError  network failure or 5xx, raised after retries run out
    VaultAuthError       login / renew / unwrap rejected, never retried
    VaultNotFoundError   path missing (no data for reads, hard error for writes)
    VaultResolutionError a reference could not be turned into a value
"""

from typing import Optional

from omnibase_vault.enums import EnumVaultErrorCode
from omnibase_vault.errors.infra_errors import (
    InfraAuthenticationError,
    InfraConnectionError,
    SecretResolutionError,
)
from omnibase_vault.errors.model_infra_error_context import ModelInfraErrorContext


class VaultTransportError(InfraConnectionError):
    """Error communicating with Vault.

    Carries the request path and, when Vault sent one, the structured error
    message extracted from the JSON ``errors`` array of the response body.

    Example:
        >>> raise VaultTransportError(
        ...     "Status 500 secret/data/app: internal error",
        ...     context=context,
        ...     path="secret/data/app",
        ...     status_code=500,
        ...     vault_message="internal error",
        ... )
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        path: Optional[str] = None,
        status_code: Optional[int] = None,
        vault_message: Optional[str] = None,
        **extra_context: object,
    ) -> None:
        """Initialize VaultTransportError.

        Args:
            message: Human-readable error message
            context: Bundled infrastructure context
            path: Vault request path that failed
            status_code: HTTP status code, None for I/O failures
            vault_message: Message Vault put into the ``errors`` array
            **extra_context: Additional context (e.g. retry_count)
        """
        self.path = path
        self.status_code = status_code
        self.vault_message = vault_message
        if path is not None:
            extra_context["path"] = path
        if status_code is not None:
            extra_context["status_code"] = status_code
        super().__init__(message=message, context=context, **extra_context)


class VaultAuthError(InfraAuthenticationError):
    """Login, renewal or unwrap rejected by Vault."""

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        path: Optional[str] = None,
        status_code: Optional[int] = None,
        vault_message: Optional[str] = None,
        **extra_context: object,
    ) -> None:
        self.path = path
        self.status_code = status_code
        self.vault_message = vault_message
        if path is not None:
            extra_context["path"] = path
        if status_code is not None:
            extra_context["status_code"] = status_code
        super().__init__(message=message, context=context, **extra_context)


class VaultNotFoundError(SecretResolutionError):
    """Read or write against a path that does not exist."""

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        path: Optional[str] = None,
        vault_message: Optional[str] = None,
        **extra_context: object,
    ) -> None:
        self.path = path
        self.status_code = 404
        self.vault_message = vault_message
        if path is not None:
            extra_context["path"] = path
        super().__init__(
            message=message,
            context=context,
            error_code=EnumVaultErrorCode.RESOURCE_NOT_FOUND,
            **extra_context,
        )


class VaultResolutionError(SecretResolutionError):
    """One or more references could not be resolved.

    ``errors`` maps each failed reference to its reason. Values are never
    included.
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        errors: Optional[dict[str, str]] = None,
        **extra_context: object,
    ) -> None:
        self.errors: dict[str, str] = dict(errors or {})
        if self.errors:
            extra_context["failed_references"] = sorted(self.errors)
        super().__init__(message=message, context=context, **extra_context)


__all__: list[str] = [
    "VaultAuthError",
    "VaultNotFoundError",
    "VaultResolutionError",
    "VaultTransportError",
]
