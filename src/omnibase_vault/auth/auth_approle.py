# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""AppRole authentication (role_id / secret_id)."""

from __future__ import annotations

from omnibase_vault.auth.auth_credentials import CredentialsAuthentication
from omnibase_vault.enums import EnumVaultAuthMethod
from omnibase_vault.errors import ProtocolConfigurationError
from omnibase_vault.models import ModelVaultFeatureSettings
from omnibase_vault.transport import VaultTransport


class AppRoleAuthentication(CredentialsAuthentication):
    """Logs in with ``POST auth/<mount>/login`` and ``{role_id, secret_id}``.

    Example:
        >>> auth = AppRoleAuthentication(transport, settings)
        >>> token = auth.login()
    """

    def __init__(
        self, transport: VaultTransport, settings: ModelVaultFeatureSettings
    ) -> None:
        if settings.auth_method is not EnumVaultAuthMethod.APPROLE:
            raise ProtocolConfigurationError(
                f"AppRole authentication configured with auth_method="
                f"{settings.auth_method.value}"
            )
        super().__init__(transport, settings)


__all__: list[str] = ["AppRoleAuthentication"]
