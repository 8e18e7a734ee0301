# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Pydantic models for the Vault build-secret broker."""

from omnibase_vault.models.model_leased_token_info import ModelLeasedTokenInfo
from omnibase_vault.models.model_parameter_resolution import (
    ModelParameterResolution,
)
from omnibase_vault.models.model_refresh_trigger import ModelRefreshTrigger
from omnibase_vault.models.model_resolving_result import ModelResolvingResult
from omnibase_vault.models.model_retry_state import ModelRetryState
from omnibase_vault.models.model_vault_feature_settings import (
    ModelVaultFeatureSettings,
)
from omnibase_vault.models.model_vault_health import ModelVaultHealth
from omnibase_vault.models.model_vault_query import (
    FIELD_SEPARATOR,
    WRITE_PREFIX,
    ModelVaultQuery,
)
from omnibase_vault.models.model_vault_retry_config import ModelVaultRetryConfig
from omnibase_vault.models.model_vault_token import ModelVaultToken
from omnibase_vault.models.model_wrapped_token_envelope import (
    ModelWrappedTokenEnvelope,
)

__all__: list[str] = [
    "FIELD_SEPARATOR",
    "WRITE_PREFIX",
    "ModelLeasedTokenInfo",
    "ModelParameterResolution",
    "ModelRefreshTrigger",
    "ModelResolvingResult",
    "ModelRetryState",
    "ModelVaultFeatureSettings",
    "ModelVaultHealth",
    "ModelVaultQuery",
    "ModelVaultRetryConfig",
    "ModelVaultToken",
    "ModelWrappedTokenEnvelope",
]
