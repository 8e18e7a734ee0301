# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Vault HTTP transport with bounded retry."""

from omnibase_vault.transport.transport_vault import (
    HEADER_VAULT_TOKEN,
    HEADER_WRAP_TTL,
    HEALTH_DOCUMENT_STATUSES,
    VaultTransport,
)
from omnibase_vault.transport.util_vault_errors import (
    extract_vault_error_message,
    is_server_error,
)

__all__: list[str] = [
    "HEADER_VAULT_TOKEN",
    "HEADER_WRAP_TTL",
    "HEALTH_DOCUMENT_STATUSES",
    "VaultTransport",
    "extract_vault_error_message",
    "is_server_error",
]
