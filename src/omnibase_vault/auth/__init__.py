# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Vault authentication methods.

Each method implements ProtocolClientAuthentication with one ``login()``
operation returning a ModelVaultToken.
"""

from omnibase_vault.auth.auth_approle import AppRoleAuthentication
from omnibase_vault.auth.auth_credentials import (
    CredentialsAuthentication,
    perform_login,
    token_from_login_response,
)
from omnibase_vault.auth.auth_cubbyhole import CubbyholeAuthentication
from omnibase_vault.auth.auth_gcp_iam import GcpIamAuthentication
from omnibase_vault.auth.auth_ldap import LdapAuthentication
from omnibase_vault.auth.auth_token import TokenAuthentication
from omnibase_vault.auth.protocol_client_authentication import (
    ProtocolClientAuthentication,
)
from omnibase_vault.auth.util_gcp_iam import GcpIamJwtSigner
from omnibase_vault.auth.util_login import (
    MASK,
    build_login_request,
    login_path,
    readable_login_message,
)

__all__: list[str] = [
    "MASK",
    "AppRoleAuthentication",
    "CredentialsAuthentication",
    "CubbyholeAuthentication",
    "GcpIamAuthentication",
    "GcpIamJwtSigner",
    "LdapAuthentication",
    "ProtocolClientAuthentication",
    "TokenAuthentication",
    "build_login_request",
    "login_path",
    "perform_login",
    "readable_login_message",
    "token_from_login_response",
]
