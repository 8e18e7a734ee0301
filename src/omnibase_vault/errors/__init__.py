# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Vault Broker Errors Module.

Exports:
    ModelInfraErrorContext: Configuration model for bundled error context
    RuntimeHostError: Base infrastructure error class
    ProtocolConfigurationError: Configuration validation errors
    SecretResolutionError: Secret resolution errors
    InfraConnectionError: Connection errors
    InfraAuthenticationError: Authentication errors
    VaultTransportError: Network / 5xx failures after retry exhaustion
    VaultAuthError: Rejected login, renewal or unwrap
    VaultNotFoundError: Missing Vault path
    VaultResolutionError: Per-reference resolution failures

Error Sanitization Guidelines:
    NEVER include in error messages or context:
        - Tokens, wrapped tokens, secret ids, passwords
        - Resolved secret values

    SAFE to include:
        - Vault paths and field names
        - Token accessors
        - Status codes, retry counts, correlation IDs
"""

from omnibase_vault.errors.error_vault import (
    VaultAuthError,
    VaultNotFoundError,
    VaultResolutionError,
    VaultTransportError,
)
from omnibase_vault.errors.infra_errors import (
    InfraAuthenticationError,
    InfraConnectionError,
    ProtocolConfigurationError,
    RuntimeHostError,
    SecretResolutionError,
)
from omnibase_vault.errors.model_infra_error_context import ModelInfraErrorContext

__all__ = [
    "InfraAuthenticationError",
    "InfraConnectionError",
    "ModelInfraErrorContext",
    "ProtocolConfigurationError",
    "RuntimeHostError",
    "SecretResolutionError",
    "VaultAuthError",
    "VaultNotFoundError",
    "VaultResolutionError",
    "VaultTransportError",
]
