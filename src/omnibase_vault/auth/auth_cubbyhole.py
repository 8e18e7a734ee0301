# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Cubbyhole authentication: unwrap a response-wrapped login token.

The agent side never sees long-term credentials. It receives a wrapping
token produced by the server-side handoff and exchanges it for the real
session token with a single ``sys/wrapping/unwrap`` call.
"""

from __future__ import annotations

import logging
import threading
from uuid import uuid4

from pydantic import SecretStr

from omnibase_vault.auth.auth_credentials import token_from_login_response
from omnibase_vault.enums import EnumInfraTransportType
from omnibase_vault.errors import ModelInfraErrorContext, VaultAuthError
from omnibase_vault.models import ModelVaultToken
from omnibase_vault.transport import VaultTransport

logger = logging.getLogger(__name__)

UNWRAP_PATH: str = "sys/wrapping/unwrap"


class CubbyholeAuthentication:
    """Single-use authentication backed by a wrapping token.

    The first ``login()`` consumes the envelope, successful or not. Every
    later call fails with VaultAuthError without contacting Vault, since
    Vault would reject the wrapping token anyway.

    Thread Safety:
        The consumed flag is flipped under a lock, so concurrent callers
        cannot unwrap twice.
    """

    def __init__(self, transport: VaultTransport, wrapped_token: SecretStr) -> None:
        self._transport = transport
        self._wrapped_token = wrapped_token
        self._consumed = False
        self._lock = threading.Lock()

    @property
    def is_consumed(self) -> bool:
        return self._consumed

    def login(self) -> ModelVaultToken:
        correlation_id = uuid4()
        with self._lock:
            if self._consumed:
                raise VaultAuthError(
                    "Wrapped token was already unwrapped",
                    context=ModelInfraErrorContext(
                        transport_type=EnumInfraTransportType.VAULT,
                        operation="unwrap",
                        target_name=UNWRAP_PATH,
                        correlation_id=correlation_id,
                    ),
                    path=UNWRAP_PATH,
                )
            self._consumed = True

        response = self._transport.unwrap(
            self._wrapped_token, correlation_id=correlation_id
        )
        token = token_from_login_response(response, UNWRAP_PATH, correlation_id)
        logger.info(
            "Unwrapped Vault session token",
            extra={"token": token.describe(), "correlation_id": str(correlation_id)},
        )
        return token


__all__: list[str] = ["UNWRAP_PATH", "CubbyholeAuthentication"]
