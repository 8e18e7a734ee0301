# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Revocation handle for a token issued to an agent."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from omnibase_vault.models.model_vault_feature_settings import (
    ModelVaultFeatureSettings,
)


class ModelLeasedTokenInfo(BaseModel):
    """Identifies a token for later revocation.

    When ``token`` is None the token is revoked through its accessor, which
    needs a fresh server-side login but never the token value itself.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    token: SecretStr | None = Field(default=None)
    accessor: str = Field(min_length=1)
    settings: ModelVaultFeatureSettings

    @property
    def is_accessor_only(self) -> bool:
        return self.token is None


__all__: list[str] = ["ModelLeasedTokenInfo"]
