# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Session manager FSM states.

FSM Diagram::

    +----------+  login   +--------+  renewal fires  +----------+
    | no_token | -------> | active | --------------> | renewing |
    +----------+          +--------+ <-------------- +----------+
         ^                    |          renewed          |
         |                    |                           | rejected / lease too short
         +--------------------+---------------------------+
                              |
                              v  destroy()
                         +---------+
                         | revoked |  (terminal)
                         +---------+
"""

from enum import Enum


class EnumSessionState(str, Enum):
    """Session manager states.

    Attributes:
        NO_TOKEN: Nothing cached; the next get_session_token() logs in.
        ACTIVE: A token is cached and handed out to callers.
        RENEWING: The scheduled renewal callback is talking to Vault.
        REVOKED: destroy() was called. Terminal.
    """

    NO_TOKEN = "no_token"
    ACTIVE = "active"
    RENEWING = "renewing"
    REVOKED = "revoked"


__all__: list[str] = ["EnumSessionState"]
