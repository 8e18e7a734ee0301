# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Pytest configuration and shared fixtures for omnibase_vault tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from pydantic import SecretStr

from omnibase_vault.models import ModelVaultFeatureSettings, ModelVaultRetryConfig
from omnibase_vault.transport import VaultTransport
from tests.helpers.util_vault import ManualTaskScheduler


@pytest.fixture
def fast_retry() -> ModelVaultRetryConfig:
    """Retry policy without delays."""
    return ModelVaultRetryConfig(
        max_attempts=3,
        initial_backoff_seconds=0.0,
        max_backoff_seconds=0.0,
        exponential_base=1.0,
    )


@pytest.fixture
def vault_settings(fast_retry: ModelVaultRetryConfig) -> ModelVaultFeatureSettings:
    """AppRole settings against a fictional Vault."""
    return ModelVaultFeatureSettings(
        url="https://vault.example.com:8200",
        role_id="build-role",
        secret_id=SecretStr("s3cr3t-id"),
        retry=fast_retry,
    )


@pytest.fixture
def mock_transport(vault_settings: ModelVaultFeatureSettings) -> MagicMock:
    """VaultTransport double with the real method signatures."""
    transport = MagicMock(spec=VaultTransport)
    transport.settings = vault_settings
    return transport


@pytest.fixture
def manual_scheduler() -> ManualTaskScheduler:
    return ManualTaskScheduler()
