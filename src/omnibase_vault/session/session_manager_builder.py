# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Factory wiring settings into a session manager."""

from __future__ import annotations

from omnibase_vault.auth import (
    AppRoleAuthentication,
    CubbyholeAuthentication,
    GcpIamAuthentication,
    LdapAuthentication,
    ProtocolClientAuthentication,
    TokenAuthentication,
)
from omnibase_vault.enums import EnumVaultAuthMethod
from omnibase_vault.models import ModelRefreshTrigger, ModelVaultFeatureSettings
from omnibase_vault.session.protocol_task_scheduler import ProtocolTaskScheduler
from omnibase_vault.session.session_manager import LifecycleAwareSessionManager
from omnibase_vault.transport import VaultTransport


def create_authentication(
    settings: ModelVaultFeatureSettings, transport: VaultTransport
) -> ProtocolClientAuthentication:
    """Pick the authentication method for ``settings``.

    Precedence: wrapped token (agent side), injected token, then the
    configured credential method.
    """
    if settings.wrapped_token is not None:
        return CubbyholeAuthentication(transport, settings.wrapped_token)
    if settings.token is not None:
        return TokenAuthentication(settings.token)
    if settings.auth_method is EnumVaultAuthMethod.LDAP:
        return LdapAuthentication(transport, settings)
    if settings.auth_method is EnumVaultAuthMethod.GCP_IAM:
        return GcpIamAuthentication(transport, settings)
    return AppRoleAuthentication(transport, settings)


def create_session_manager(
    settings: ModelVaultFeatureSettings,
    transport: VaultTransport | None = None,
    scheduler: ProtocolTaskScheduler | None = None,
) -> LifecycleAwareSessionManager:
    transport = transport or VaultTransport(settings)
    return LifecycleAwareSessionManager(
        authentication=create_authentication(settings, transport),
        transport=transport,
        scheduler=scheduler,
        refresh_trigger=ModelRefreshTrigger(
            lead_time_seconds=settings.token_refresh_lead_seconds
        ),
    )


__all__: list[str] = ["create_authentication", "create_session_manager"]
