# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Helpers for reading failed Vault responses.

The transport asks hvac's adapter not to raise on error statuses, so the
status code always comes straight from the response. hvac only has
exception classes for some statuses and raises ``UnexpectedError`` for the
rest (504, 505, 507, ...), which would lose the code.
"""

from __future__ import annotations

import requests


def is_server_error(status: int | None) -> bool:
    return status is not None and 500 <= status <= 599


def extract_vault_error_message(response: requests.Response) -> str:
    """Structured message from the response ``errors`` array.

    A single-element array is unwrapped to the bare message; longer arrays are
    joined. Falls back to the raw body text, then to the HTTP reason.
    """
    try:
        body = response.json()
    except ValueError:
        body = None
    errors = body.get("errors") if isinstance(body, dict) else None
    if isinstance(errors, list) and errors:
        if len(errors) == 1:
            return str(errors[0])
        return "[" + ", ".join(str(item) for item in errors) + "]"
    text = response.text.strip() if response.content else ""
    if text:
        return text
    return response.reason or f"HTTP {response.status_code}"


def format_status_message(status: int | None, path: str, message: str) -> str:
    """``Status <code> <path>: <message>`` as used in all transport errors."""
    prefix = f"Status {status} {path}" if status is not None else f"Request {path}"
    if message:
        return f"{prefix}: {message}"
    return prefix


__all__: list[str] = [
    "extract_vault_error_message",
    "format_status_message",
    "is_server_error",
]
