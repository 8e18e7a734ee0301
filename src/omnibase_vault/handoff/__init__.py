# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Server-side wrapped token handoff and revocation."""

from omnibase_vault.handoff.token_handoff import (
    REVOKE_SELF_BACKOFF_SECONDS,
    TokenHandoffProtocol,
)

__all__: list[str] = ["REVOKE_SELF_BACKOFF_SECONDS", "TokenHandoffProtocol"]
