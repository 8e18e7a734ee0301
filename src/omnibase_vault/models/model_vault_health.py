# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Result of a sys/health request."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelVaultHealth(BaseModel):
    """Vault server health as reported by ``GET sys/health``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    initialized: bool = Field(default=False)
    sealed: bool = Field(default=True)
    standby: bool = Field(default=False)
    version: str | None = Field(default=None)
    cluster_name: str | None = Field(default=None)

    @property
    def is_available(self) -> bool:
        return self.initialized and not self.sealed


__all__: list[str] = ["ModelVaultHealth"]
