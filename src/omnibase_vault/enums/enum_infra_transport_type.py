# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Infrastructure Transport Type Enumeration.

Defines the transport types used in error context for the Vault broker.
"""

from enum import Enum


class EnumInfraTransportType(str, Enum):
    """Transport types for error context.

    Attributes:
        HTTP: Plain HTTP transport
        VAULT: HashiCorp Vault secret transport
        RUNTIME: In-process operations (parsing, substitution, scheduling)
    """

    HTTP = "http"
    VAULT = "vault"
    RUNTIME = "runtime"


__all__ = ["EnumInfraTransportType"]
