# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Renewal timing policy for session tokens."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field

from omnibase_vault.models.model_vault_token import ModelVaultToken

MIN_RENEWAL_DELAY_SECONDS: float = 1.0


class ModelRefreshTrigger(BaseModel):
    """Fixed lead-time renewal trigger.

    Renewal fires ``lead_time_seconds`` before the lease ends, counted from
    the moment the token was issued, but never sooner than one second from
    now. A renewed lease at or below
    ``min_valid_threshold_seconds`` is considered unusable.

    Example:
        >>> trigger = ModelRefreshTrigger(lead_time_seconds=15)
        >>> trigger.min_valid_threshold_seconds
        17.0
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    lead_time_seconds: float = Field(
        default=15.0,
        ge=0.0,
        description="How long before lease expiry renewal should fire",
    )
    safety_margin_seconds: float = Field(
        default=2.0,
        ge=0.0,
        description="Added to the lead time to form the minimum usable lease",
    )

    @property
    def min_valid_threshold_seconds(self) -> float:
        return self.lead_time_seconds + self.safety_margin_seconds

    def next_execution_time(
        self, token: ModelVaultToken, now: datetime | None = None
    ) -> datetime:
        """Absolute instant at which the token should be renewed.

        Args:
            token: Token whose lease drives the schedule
            now: Current time, defaults to the current UTC time

        Returns:
            ``issued_at + lease - lead_time``, clamped to ``now + 1s``
        """
        now = now or datetime.now(UTC)
        due = token.issued_at + timedelta(
            seconds=token.lease_duration_seconds - self.lead_time_seconds
        )
        return max(due, now + timedelta(seconds=MIN_RENEWAL_DELAY_SECONDS))


__all__: list[str] = ["MIN_RENEWAL_DELAY_SECONDS", "ModelRefreshTrigger"]
