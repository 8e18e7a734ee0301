# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Vault authentication method enumeration."""

from enum import Enum


class EnumVaultAuthMethod(str, Enum):
    """Authentication methods a connection can log in with.

    The value doubles as the default auth mount path in Vault.

    Attributes:
        APPROLE: Machine identity via role_id / secret_id
        LDAP: Username / password against an LDAP auth mount
        GCP_IAM: Google service account JWT signed through the IAM
            Credentials API
    """

    APPROLE = "approle"
    LDAP = "ldap"
    GCP_IAM = "gcp"


__all__: list[str] = ["EnumVaultAuthMethod"]
