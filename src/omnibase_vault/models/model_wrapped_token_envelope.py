# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Single-use envelope carrying a wrapped session token."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class ModelWrappedTokenEnvelope(BaseModel):
    """Wrapped token handed from the privileged side to the agent.

    ``wrapped_token`` can be unwrapped exactly once. ``accessor`` is the
    accessor of the token inside the envelope; it stays usable for
    revocation after the envelope is consumed or expires.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    wrapped_token: SecretStr = Field(description="Response-wrapping token")
    accessor: str = Field(min_length=1, description="Accessor of the wrapped token")
    ttl_seconds: int | None = Field(default=None, ge=0)


__all__: list[str] = ["ModelWrappedTokenEnvelope"]
