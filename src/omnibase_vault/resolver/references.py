# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Vault references embedded in build parameter values.

A parameter value may contain any number of references::

    %vault:<query>%          default connection
    %vault:<id>:<query>%     connection with id <id>

The collected reference is the text between the ``%`` delimiters. A ``/``
before the first ``:`` of the query means there is no connection id, so
``vault:/path:with:colons`` belongs to the default connection.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

VAULT_PREFIX: str = "vault:"
DEPENDENCY_KEY_PREFIX: str = "dep."
DEFAULT_CONNECTION_ID: str = ""

_REFERENCE_PATTERN = re.compile(r"%(vault:[^%]+)%")


def is_default(connection_id: str) -> bool:
    return connection_id == DEFAULT_CONNECTION_ID


def _prefix(connection_id: str) -> str:
    if is_default(connection_id):
        return VAULT_PREFIX
    return f"{VAULT_PREFIX}{connection_id}:"


def get_connection_id(reference: str) -> str:
    """Connection id of a reference, ``""`` for the default connection.

    Example:
        >>> get_connection_id("vault:ns:/path")
        'ns'
        >>> get_connection_id("vault:/path:with:colons")
        ''
    """
    value = reference.removeprefix(VAULT_PREFIX)
    colon = value.find(":")
    slash = value.find("/")
    if colon < 0 or 0 <= slash < colon:
        return DEFAULT_CONNECTION_ID
    return value[:colon]


def get_path(reference: str, connection_id: str) -> str:
    """Query part of a reference, always with a leading ``/``."""
    query = reference.removeprefix(_prefix(connection_id))
    return query if query.startswith("/") else f"/{query}"


def make_reference(connection_id: str, query: str) -> str:
    """Build a ``%vault:[id:]query%`` reference."""
    return f"%{_prefix(connection_id)}{query}%"


def find_references(value: str) -> list[str]:
    """All references in one value, in order of appearance."""
    return _REFERENCE_PATTERN.findall(value)


def collect_references(
    parameters: Mapping[str, str], connection_id: str = DEFAULT_CONNECTION_ID
) -> list[str]:
    """Sorted, de-duplicated references belonging to ``connection_id``.

    Parameters whose key starts with ``dep.`` are skipped.
    """
    found: set[str] = set()
    for key, value in parameters.items():
        if key.startswith(DEPENDENCY_KEY_PREFIX) or "%" not in value:
            continue
        found.update(
            reference
            for reference in find_references(value)
            if get_connection_id(reference) == connection_id
        )
    return sorted(found)


def substitute(
    parameters: Mapping[str, str], replacements: Mapping[str, str]
) -> dict[str, str]:
    """Replace each ``%reference%`` with its resolved value.

    References without a replacement are left untouched.
    """

    def replace(match: re.Match[str]) -> str:
        return replacements.get(match.group(1), match.group(0))

    return {
        key: _REFERENCE_PATTERN.sub(replace, value) if "%" in value else value
        for key, value in parameters.items()
    }


__all__: list[str] = [
    "DEFAULT_CONNECTION_ID",
    "VAULT_PREFIX",
    "collect_references",
    "find_references",
    "get_connection_id",
    "get_path",
    "is_default",
    "make_reference",
    "substitute",
]
