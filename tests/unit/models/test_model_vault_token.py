# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for ModelVaultToken and ModelRefreshTrigger."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from omnibase_vault.models import ModelRefreshTrigger, ModelVaultToken
from tests.helpers.util_vault import make_token

pytestmark = [pytest.mark.unit]


class TestVaultToken:
    """Tests for token construction and description."""

    def test_from_auth(self) -> None:
        token = ModelVaultToken.from_auth(
            {
                "client_token": "s.abc",
                "accessor": "acc",
                "lease_duration": 120,
                "renewable": True,
            }
        )

        assert token.token.get_secret_value() == "s.abc"
        assert token.accessor == "acc"
        assert token.lease_duration_seconds == 120
        assert token.is_renewable is True
        assert token.is_login_token is True

    def test_from_auth_without_client_token(self) -> None:
        with pytest.raises(ValueError, match="client_token"):
            ModelVaultToken.from_auth({"accessor": "acc"})

    def test_injected_token_is_not_renewable(self) -> None:
        token = ModelVaultToken.of("s.injected")

        assert token.is_login_token is False
        assert token.is_renewable is False
        assert token.describe() == "VaultToken(injected)"

    def test_zero_lease_is_not_renewable(self) -> None:
        assert make_token(lease_duration=0).is_renewable is False
        assert make_token(lease_duration=0).expires_at is None

    def test_describe_and_repr_hide_value(self) -> None:
        token = make_token(value="s.very-secret")

        assert "s.very-secret" not in token.describe()
        assert "s.very-secret" not in repr(token)


class TestRefreshTrigger:
    """Tests for renewal timing."""

    def test_min_valid_threshold(self) -> None:
        trigger = ModelRefreshTrigger(lead_time_seconds=15)

        assert trigger.min_valid_threshold_seconds == 17.0

    def test_fires_lead_time_before_expiry(self) -> None:
        trigger = ModelRefreshTrigger(lead_time_seconds=15)
        now = datetime(2025, 1, 1, tzinfo=UTC)

        at = trigger.next_execution_time(
            make_token(lease_duration=60, issued_at=now), now=now
        )

        assert at == now + timedelta(seconds=45)

    @pytest.mark.parametrize("lease", [0, 5, 15, 16])
    def test_never_sooner_than_one_second(self, lease: int) -> None:
        trigger = ModelRefreshTrigger(lead_time_seconds=15)
        now = datetime(2025, 1, 1, tzinfo=UTC)

        at = trigger.next_execution_time(
            make_token(lease_duration=lease, issued_at=now), now=now
        )

        assert at >= now + timedelta(seconds=1)

    def test_counts_from_issue_time(self) -> None:
        trigger = ModelRefreshTrigger(lead_time_seconds=15)
        issued = datetime(2025, 1, 1, tzinfo=UTC)
        token = make_token(lease_duration=60, issued_at=issued)

        at = trigger.next_execution_time(token, now=issued + timedelta(seconds=40))

        assert at == issued + timedelta(seconds=45)

    def test_overdue_token_clamped_to_one_second_from_now(self) -> None:
        trigger = ModelRefreshTrigger(lead_time_seconds=15)
        issued = datetime(2025, 1, 1, tzinfo=UTC)
        now = issued + timedelta(minutes=10)
        token = make_token(lease_duration=60, issued_at=issued)

        at = trigger.next_execution_time(token, now=now)

        assert at == now + timedelta(seconds=1)
