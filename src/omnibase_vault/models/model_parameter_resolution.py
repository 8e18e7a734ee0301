# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Parameter set after reference substitution."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelParameterResolution(BaseModel):
    """Build parameters with Vault references replaced.

    Attributes:
        parameters: The full parameter set; unresolved references stay as-is
        resolved_keys: Keys whose value changed
        errors: Failed reference -> reason
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    parameters: dict[str, str] = Field(default_factory=dict, repr=False)
    resolved_keys: list[str] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)


__all__: list[str] = ["ModelParameterResolution"]
