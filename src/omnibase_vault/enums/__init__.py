# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Enumerations for the Vault build-secret broker."""

from omnibase_vault.enums.enum_infra_transport_type import EnumInfraTransportType
from omnibase_vault.enums.enum_session_state import EnumSessionState
from omnibase_vault.enums.enum_vault_auth_method import EnumVaultAuthMethod
from omnibase_vault.enums.enum_vault_error_code import EnumVaultErrorCode

__all__: list[str] = [
    "EnumInfraTransportType",
    "EnumSessionState",
    "EnumVaultAuthMethod",
    "EnumVaultErrorCode",
]
