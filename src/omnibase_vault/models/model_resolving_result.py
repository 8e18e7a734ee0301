# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Outcome of one resolve pass."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelResolvingResult(BaseModel):
    """Resolved values and per-reference failures of one resolve pass.

    Both mappings are keyed by the original reference string. The values in
    ``replacements`` are plaintext secrets, kept out of ``repr()``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    replacements: dict[str, str] = Field(default_factory=dict, repr=False)
    errors: dict[str, str] = Field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return not self.errors


__all__: list[str] = ["ModelResolvingResult"]
