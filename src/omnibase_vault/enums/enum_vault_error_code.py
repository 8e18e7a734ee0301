# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Error codes attached to every RuntimeHostError."""

from enum import Enum


class EnumVaultErrorCode(str, Enum):
    """Error classification codes.

    Attributes:
        OPERATION_FAILED: Generic failure, used when nothing more specific applies
        INVALID_CONFIGURATION: Settings failed validation
        TRANSPORT_ERROR: Network failure or 5xx after retries were exhausted
        AUTHENTICATION_ERROR: Login, renewal or unwrap rejected by Vault
        RESOURCE_NOT_FOUND: Path does not exist in Vault
        RESOLUTION_ERROR: A reference could not be turned into a value
    """

    OPERATION_FAILED = "OPERATION_FAILED"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOLUTION_ERROR = "RESOLUTION_ERROR"


__all__: list[str] = ["EnumVaultErrorCode"]
