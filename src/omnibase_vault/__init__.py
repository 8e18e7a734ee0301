# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""HashiCorp Vault build-secret broker.

Lets a build pipeline fetch secrets at build time without embedding
long-lived credentials in build configuration:

    - session: token login, scheduled renewal and revoke on shutdown
    - handoff: server-side wrapped token issue and accessor revocation
    - resolver: reference parsing, de-duplicated reads, substitution and
      log redaction
    - transport: hvac-based Vault HTTP access with bounded retry
"""

__version__ = "0.1.0"

__all__: list[str] = ["__version__"]
