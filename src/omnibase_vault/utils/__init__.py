# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Shared utilities."""

from omnibase_vault.utils.util_masking import MASK, mask_secrets

__all__: list[str] = ["MASK", "mask_secrets"]
