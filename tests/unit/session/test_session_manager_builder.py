# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for session manager wiring."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from pydantic import SecretStr

from omnibase_vault.auth import (
    AppRoleAuthentication,
    CubbyholeAuthentication,
    GcpIamAuthentication,
    LdapAuthentication,
    TokenAuthentication,
)
from omnibase_vault.enums import EnumVaultAuthMethod
from omnibase_vault.models import ModelVaultFeatureSettings
from omnibase_vault.session import create_authentication, create_session_manager

pytestmark = [pytest.mark.unit]


class TestCreateAuthentication:
    def test_wrapped_token_wins(
        self, vault_settings: ModelVaultFeatureSettings, mock_transport: MagicMock
    ) -> None:
        settings = vault_settings.model_copy(
            update={"wrapped_token": SecretStr("w"), "token": SecretStr("t")}
        )

        auth = create_authentication(settings, mock_transport)

        assert isinstance(auth, CubbyholeAuthentication)

    def test_injected_token(
        self, vault_settings: ModelVaultFeatureSettings, mock_transport: MagicMock
    ) -> None:
        settings = vault_settings.model_copy(update={"token": SecretStr("t")})

        assert isinstance(
            create_authentication(settings, mock_transport), TokenAuthentication
        )

    def test_approle(
        self, vault_settings: ModelVaultFeatureSettings, mock_transport: MagicMock
    ) -> None:
        assert isinstance(
            create_authentication(vault_settings, mock_transport),
            AppRoleAuthentication,
        )

    def test_ldap(self, mock_transport: MagicMock) -> None:
        settings = ModelVaultFeatureSettings(
            url="https://vault:8200",
            auth_method=EnumVaultAuthMethod.LDAP,
            username="u",
            password=SecretStr("p"),
        )

        assert isinstance(
            create_authentication(settings, mock_transport), LdapAuthentication
        )

    def test_gcp_iam(self, mock_transport: MagicMock) -> None:
        settings = ModelVaultFeatureSettings(
            url="https://vault:8200",
            auth_method=EnumVaultAuthMethod.GCP_IAM,
            gcp_role="ci",
        )

        assert isinstance(
            create_authentication(settings, mock_transport), GcpIamAuthentication
        )


class TestCreateSessionManager:
    def test_lead_time_from_settings(
        self, vault_settings: ModelVaultFeatureSettings, mock_transport: MagicMock
    ) -> None:
        settings = vault_settings.model_copy(
            update={"token_refresh_lead_seconds": 30.0}
        )

        manager = create_session_manager(settings, mock_transport)

        assert manager.refresh_trigger.lead_time_seconds == 30.0
        assert manager.refresh_trigger.min_valid_threshold_seconds == 32.0
        manager.destroy()
