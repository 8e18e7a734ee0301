# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Protocol for a single Vault login exchange.

The session manager depends only on this protocol. Each authentication
method (AppRole, LDAP, cubbyhole unwrap, injected token) is one
implementation with a single ``login()`` operation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from omnibase_vault.models import ModelVaultToken


@runtime_checkable
class ProtocolClientAuthentication(Protocol):
    """Turns a credential into a Vault token.

    Implementations perform exactly one login exchange per call and raise
    VaultAuthError when Vault rejects the credential.
    """

    def login(self) -> ModelVaultToken:
        """Log in and return the resulting token with its lease metadata."""
        ...


__all__: list[str] = ["ProtocolClientAuthentication"]
