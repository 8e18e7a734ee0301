# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""LDAP authentication (username / password)."""

from __future__ import annotations

from omnibase_vault.auth.auth_credentials import CredentialsAuthentication
from omnibase_vault.enums import EnumVaultAuthMethod
from omnibase_vault.errors import ProtocolConfigurationError
from omnibase_vault.models import ModelVaultFeatureSettings
from omnibase_vault.transport import VaultTransport


class LdapAuthentication(CredentialsAuthentication):
    """Logs in with ``POST auth/<mount>/login/<username>`` and ``{password}``."""

    def __init__(
        self, transport: VaultTransport, settings: ModelVaultFeatureSettings
    ) -> None:
        if settings.auth_method is not EnumVaultAuthMethod.LDAP:
            raise ProtocolConfigurationError(
                f"LDAP authentication configured with auth_method="
                f"{settings.auth_method.value}"
            )
        super().__init__(transport, settings)


__all__: list[str] = ["LdapAuthentication"]
