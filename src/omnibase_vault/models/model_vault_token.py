# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Vault token model.

Security Note:
    The token value is a SecretStr. It is exposed only at the moment it is
    placed into the X-Vault-Token header.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class ModelVaultToken(BaseModel):
    """A Vault token plus the lease metadata returned with it.

    Login tokens come from an auth method (or an unwrapped login response) and
    are revoked when the session ends. Tokens built with ``of()`` are one-off
    init tokens handed in from outside; they are never renewed or revoked.

    Attributes:
        token: The opaque token value
        accessor: Token accessor, if Vault returned one
        renewable: Whether Vault allows renew-self on this token
        lease_duration_seconds: Server-declared validity window
        issued_at: When this client received the token
        is_login_token: False for injected one-off tokens
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    token: SecretStr = Field(description="Opaque token value")
    accessor: str | None = Field(default=None, description="Token accessor")
    renewable: bool = Field(default=False)
    lease_duration_seconds: int = Field(default=0, ge=0)
    issued_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    is_login_token: bool = Field(default=True)

    @property
    def is_renewable(self) -> bool:
        """A token is renewable only if it is a login token with a positive lease."""
        return (
            self.is_login_token and self.renewable and self.lease_duration_seconds > 0
        )

    @property
    def expires_at(self) -> datetime | None:
        if self.lease_duration_seconds <= 0:
            return None
        return self.issued_at + timedelta(seconds=self.lease_duration_seconds)

    @classmethod
    def from_auth(cls, auth: Mapping[str, object]) -> ModelVaultToken:
        """Build a login token from the ``auth`` block of a Vault response.

        Raises:
            ValueError: If the block carries no ``client_token``.
        """
        client_token = auth.get("client_token")
        if not isinstance(client_token, str) or not client_token:
            raise ValueError("Vault response has no 'client_token' in 'auth'")
        accessor = auth.get("accessor")
        lease = auth.get("lease_duration")
        return cls(
            token=SecretStr(client_token),
            accessor=accessor if isinstance(accessor, str) else None,
            renewable=auth.get("renewable") is True,
            lease_duration_seconds=int(lease) if isinstance(lease, int | float) else 0,
        )

    @classmethod
    def of(cls, token: str) -> ModelVaultToken:
        """Wrap an injected token that this process does not own."""
        return cls(token=SecretStr(token), is_login_token=False)

    def describe(self) -> str:
        """Loggable description. Never contains the token value."""
        if not self.is_login_token:
            return "VaultToken(injected)"
        return (
            f"LoginToken(renewable={self.renewable}, "
            f"lease_duration={self.lease_duration_seconds})"
        )


__all__: list[str] = ["ModelVaultToken"]
