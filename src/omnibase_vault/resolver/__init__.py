# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Secret reference parsing, resolution, substitution and redaction."""

from omnibase_vault.resolver.parameters_resolver import VaultParametersResolver
from omnibase_vault.resolver.query_resolver import (
    VaultQueryResolver,
    is_kv2_data,
    unwrap_kv2,
)
from omnibase_vault.resolver.redaction import (
    ProtocolRedactionSink,
    RedactingLogFilter,
)
from omnibase_vault.resolver.references import (
    collect_references,
    find_references,
    get_connection_id,
    get_path,
    make_reference,
    substitute,
)

__all__: list[str] = [
    "ProtocolRedactionSink",
    "RedactingLogFilter",
    "VaultParametersResolver",
    "VaultQueryResolver",
    "collect_references",
    "find_references",
    "get_connection_id",
    "get_path",
    "is_kv2_data",
    "make_reference",
    "substitute",
    "unwrap_kv2",
]
