# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for VaultParametersResolver."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from omnibase_vault.errors import VaultAuthError, VaultResolutionError
from omnibase_vault.models import ModelVaultFeatureSettings
from omnibase_vault.resolver import (
    RedactingLogFilter,
    VaultParametersResolver,
    VaultQueryResolver,
)
from tests.helpers.util_vault import make_kv2_response, make_token

pytestmark = [pytest.mark.unit]


@pytest.fixture
def session_manager() -> MagicMock:
    manager = MagicMock()
    manager.get_session_token.return_value = make_token()
    return manager


def build_resolver(
    settings: ModelVaultFeatureSettings,
    session_manager: MagicMock,
    transport: MagicMock,
    sink: RedactingLogFilter | None = None,
) -> VaultParametersResolver:
    return VaultParametersResolver(
        settings=settings,
        session_manager=session_manager,
        query_resolver=VaultQueryResolver(
            transport,
            write_engine_enabled=settings.write_engine_enabled,
            redaction_sink=sink,
        ),
    )


class TestResolveParameters:
    def test_substitutes_references(
        self,
        vault_settings: ModelVaultFeatureSettings,
        session_manager: MagicMock,
        mock_transport: MagicMock,
    ) -> None:
        mock_transport.read.return_value = make_kv2_response(
            {"user": "alice", "password": "hunter2"}
        )
        resolver = build_resolver(vault_settings, session_manager, mock_transport)

        resolution = resolver.resolve_parameters(
            {
                "db.url": "postgres://%vault:secret/data/db!/user%@host",
                "db.password": "%vault:/secret/data/db!/password%",
                "plain": "value",
            }
        )

        assert resolution.parameters == {
            "db.url": "postgres://alice@host",
            "db.password": "hunter2",
            "plain": "value",
        }
        assert resolution.resolved_keys == ["db.password", "db.url"]
        assert resolution.errors == {}
        mock_transport.read.assert_called_once()

    def test_no_references_skips_login(
        self,
        vault_settings: ModelVaultFeatureSettings,
        session_manager: MagicMock,
        mock_transport: MagicMock,
    ) -> None:
        resolver = build_resolver(vault_settings, session_manager, mock_transport)

        resolution = resolver.resolve_parameters({"a": "b", "c": "%other%"})

        assert resolution.parameters == {"a": "b", "c": "%other%"}
        session_manager.get_session_token.assert_not_called()

    def test_other_connection_left_alone(
        self,
        vault_settings: ModelVaultFeatureSettings,
        session_manager: MagicMock,
        mock_transport: MagicMock,
    ) -> None:
        resolver = build_resolver(vault_settings, session_manager, mock_transport)

        resolution = resolver.resolve_parameters({"a": "%vault:prod:/secret%"})

        assert resolution.parameters == {"a": "%vault:prod:/secret%"}
        mock_transport.read.assert_not_called()

    def test_named_connection(
        self,
        vault_settings: ModelVaultFeatureSettings,
        session_manager: MagicMock,
        mock_transport: MagicMock,
    ) -> None:
        settings = vault_settings.model_copy(update={"connection_id": "prod"})
        mock_transport.read.return_value = {"data": {"value": "v"}}
        resolver = build_resolver(settings, session_manager, mock_transport)

        resolution = resolver.resolve_parameters(
            {"a": "%vault:prod:/secret/x%", "b": "%vault:/secret/y%"}
        )

        assert resolution.parameters == {"a": "v", "b": "%vault:/secret/y%"}
        assert mock_transport.read.call_args.args[0] == "secret/x"

    def test_fail_on_error_raises(
        self,
        vault_settings: ModelVaultFeatureSettings,
        session_manager: MagicMock,
        mock_transport: MagicMock,
    ) -> None:
        mock_transport.read.return_value = {"data": {"a": "1", "b": "2"}}
        resolver = build_resolver(vault_settings, session_manager, mock_transport)

        with pytest.raises(VaultResolutionError) as exc_info:
            resolver.resolve_parameters({"p": "%vault:/secret/multi%"})

        assert list(exc_info.value.errors) == ["vault:/secret/multi"]
        assert "Failed to resolve 1 HashiCorp Vault parameters" in str(exc_info.value)

    def test_errors_collected_without_fail_on_error(
        self,
        vault_settings: ModelVaultFeatureSettings,
        session_manager: MagicMock,
        mock_transport: MagicMock,
    ) -> None:
        settings = vault_settings.model_copy(update={"fail_on_error": False})
        mock_transport.read.side_effect = lambda path, token, **kwargs: (
            {"data": {"value": "ok"}} if path == "good" else {"data": {}}
        )
        resolver = build_resolver(settings, session_manager, mock_transport)

        resolution = resolver.resolve_parameters(
            {"a": "%vault:/good%", "b": "%vault:/empty%"}
        )

        assert resolution.parameters == {"a": "ok", "b": "%vault:/empty%"}
        assert resolution.resolved_keys == ["a"]
        assert set(resolution.errors) == {"vault:/empty"}

    def test_login_failure_propagates(
        self,
        vault_settings: ModelVaultFeatureSettings,
        session_manager: MagicMock,
        mock_transport: MagicMock,
    ) -> None:
        session_manager.get_session_token.side_effect = VaultAuthError("denied")
        resolver = build_resolver(vault_settings, session_manager, mock_transport)

        with pytest.raises(VaultAuthError):
            resolver.resolve_parameters({"a": "%vault:/x%"})

    def test_resolved_values_registered_for_redaction(
        self,
        vault_settings: ModelVaultFeatureSettings,
        session_manager: MagicMock,
        mock_transport: MagicMock,
    ) -> None:
        mock_transport.read.return_value = {"data": {"value": "hunter2"}}
        sink = RedactingLogFilter()
        resolver = build_resolver(
            vault_settings, session_manager, mock_transport, sink
        )

        resolver.resolve_parameters({"a": "%vault:/x%"})

        assert sink.redact("pw=hunter2") == "pw=*******"


class TestResolveRemoteParameters:
    def test_resolves_by_key(
        self,
        vault_settings: ModelVaultFeatureSettings,
        session_manager: MagicMock,
        mock_transport: MagicMock,
    ) -> None:
        mock_transport.read.return_value = {"data": {"user": "u", "pass": "p"}}
        resolver = build_resolver(vault_settings, session_manager, mock_transport)

        values = resolver.resolve_remote_parameters(
            {"env.USER": "/secret/app!/user", "env.PASS": "/secret/app!/pass"}
        )

        assert values == {"env.USER": "u", "env.PASS": "p"}
        mock_transport.read.assert_called_once()

    def test_empty(
        self,
        vault_settings: ModelVaultFeatureSettings,
        session_manager: MagicMock,
        mock_transport: MagicMock,
    ) -> None:
        resolver = build_resolver(vault_settings, session_manager, mock_transport)

        assert resolver.resolve_remote_parameters({}) == {}
        session_manager.get_session_token.assert_not_called()

    def test_failure_reported_by_key(
        self,
        vault_settings: ModelVaultFeatureSettings,
        session_manager: MagicMock,
        mock_transport: MagicMock,
    ) -> None:
        mock_transport.read.return_value = {"data": {"user": "u"}}
        resolver = build_resolver(vault_settings, session_manager, mock_transport)

        with pytest.raises(VaultResolutionError) as exc_info:
            resolver.resolve_remote_parameters({"env.PASS": "/secret/app!/pass"})

        assert list(exc_info.value.errors) == ["env.PASS"]


class TestFromSettings:
    def test_wires_components(
        self, vault_settings: ModelVaultFeatureSettings, mock_transport: MagicMock
    ) -> None:
        resolver = VaultParametersResolver.from_settings(
            vault_settings, transport=mock_transport
        )

        try:
            assert resolver.session_manager.token is None
        finally:
            resolver.session_manager.destroy()
