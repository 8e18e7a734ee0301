# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Secret masking for messages and log output."""

from __future__ import annotations

from collections.abc import Iterable

MASK: str = "*******"


def mask_secrets(text: str, secrets: Iterable[str], mask: str = MASK) -> str:
    """Replace every occurrence of each secret in ``text`` with ``mask``.

    Longer secrets are replaced first so that a secret containing another
    one is masked as a whole.
    """
    for secret in sorted({s for s in secrets if s}, key=len, reverse=True):
        text = text.replace(secret, mask)
    return text


__all__: list[str] = ["MASK", "mask_secrets"]
