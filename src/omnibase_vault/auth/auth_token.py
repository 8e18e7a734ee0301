# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Injected token authentication."""

from __future__ import annotations

from pydantic import SecretStr

from omnibase_vault.models import ModelVaultToken


class TokenAuthentication:
    """Returns a token handed in from outside.

    The token is not owned by the session: it is never renewed and never
    revoked on shutdown.
    """

    def __init__(self, token: SecretStr) -> None:
        self._token = token

    def login(self) -> ModelVaultToken:
        return ModelVaultToken.of(self._token.get_secret_value())


__all__: list[str] = ["TokenAuthentication"]
