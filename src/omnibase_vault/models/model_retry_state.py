# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Immutable retry bookkeeping for the transport retry loop."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelRetryState(BaseModel):
    """Retry state, replaced (never mutated) after every failed attempt.

    Example:
        >>> state = ModelRetryState(max_attempts=3, delay_seconds=0.1)
        >>> state = state.next_attempt("boom", max_delay_seconds=1.0)
        >>> state.attempt, state.is_retriable()
        (1, True)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    attempt: int = Field(default=0, ge=0, description="Failed attempts so far")
    max_attempts: int = Field(default=3, ge=1, description="Attempt budget")
    delay_seconds: float = Field(
        default=0.2, ge=0.0, description="Delay before the next attempt"
    )
    backoff_multiplier: float = Field(default=2.0, ge=1.0)
    last_error: str | None = Field(default=None)

    def is_retriable(self) -> bool:
        """Return True while the attempt budget is not spent."""
        return self.attempt < self.max_attempts

    def next_attempt(
        self, error_message: str, max_delay_seconds: float
    ) -> ModelRetryState:
        """Record a failed attempt and compute the delay before the next one.

        The first retry waits ``delay_seconds``; every later retry multiplies
        the previous delay by ``backoff_multiplier`` up to ``max_delay_seconds``.
        """
        if self.attempt == 0:
            delay = min(self.delay_seconds, max_delay_seconds)
        else:
            delay = min(self.delay_seconds * self.backoff_multiplier, max_delay_seconds)
        return self.model_copy(
            update={
                "attempt": self.attempt + 1,
                "delay_seconds": delay,
                "last_error": error_message,
            }
        )


__all__: list[str] = ["ModelRetryState"]
