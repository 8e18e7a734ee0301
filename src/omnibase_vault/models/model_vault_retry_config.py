# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Vault retry configuration model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelVaultRetryConfig(BaseModel):
    """Bounded retry policy for Vault requests.

    Only 5xx responses and transport-level I/O failures are retried. A
    ``exponential_base`` of 1.0 gives a fixed delay between attempts.

    Attributes:
        max_attempts: Total attempts including the first one
        initial_backoff_seconds: Delay before the first retry
        max_backoff_seconds: Upper bound for any single delay
        exponential_base: Multiplier applied to the delay after each retry
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    max_attempts: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Total attempts including the first one",
    )
    initial_backoff_seconds: float = Field(
        default=0.2,
        ge=0.0,
        le=60.0,
        description="Delay before the first retry in seconds",
    )
    max_backoff_seconds: float = Field(
        default=10.0,
        ge=0.0,
        le=300.0,
        description="Maximum delay between attempts in seconds",
    )
    exponential_base: float = Field(
        default=2.0,
        ge=1.0,
        le=10.0,
        description="Backoff multiplier (1.0 = fixed delay)",
    )


__all__: list[str] = ["ModelVaultRetryConfig"]
