# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Lifecycle-aware Vault session manager.

Owns the current session token: logs in lazily, renews it in the
background before its lease runs out and revokes it on shutdown.

State Machine:
    NO_TOKEN -> ACTIVE -> RENEWING -> ACTIVE | NO_TOKEN
    any state -> REVOKED (terminal, via destroy())

Concurrency:
    - get_session_token() performs a double-checked login under a lock, so
      concurrent callers during an in-flight login all observe one token
    - Only one renewal callback is scheduled at a time
    - A caller forcing a login while a renewal is in flight may race with
      it; whichever write lands last becomes the effective token
    - destroy() is safe to call concurrently with a pending renewal
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from uuid import uuid4

from omnibase_vault.auth import ProtocolClientAuthentication
from omnibase_vault.enums import EnumInfraTransportType, EnumSessionState
from omnibase_vault.errors import (
    ModelInfraErrorContext,
    RuntimeHostError,
    VaultAuthError,
)
from omnibase_vault.models import ModelRefreshTrigger, ModelVaultToken
from omnibase_vault.session.protocol_task_scheduler import (
    ProtocolScheduledTask,
    ProtocolTaskScheduler,
)
from omnibase_vault.session.task_scheduler import ThreadingTaskScheduler
from omnibase_vault.transport import VaultTransport

logger = logging.getLogger(__name__)


class LifecycleAwareSessionManager:
    """Session token cache with scheduled renewal and revoke-on-destroy.

    Example:
        >>> manager = LifecycleAwareSessionManager(auth, transport)
        >>> token = manager.get_session_token()
        >>> transport.read("secret/data/app", token.token)
        >>> manager.destroy()
    """

    def __init__(
        self,
        authentication: ProtocolClientAuthentication,
        transport: VaultTransport,
        scheduler: ProtocolTaskScheduler | None = None,
        refresh_trigger: ModelRefreshTrigger | None = None,
    ) -> None:
        """Initialize the session manager.

        Args:
            authentication: Login method used whenever no token is cached
            transport: Transport for renew-self and revoke-self
            scheduler: Scheduler for renewal callbacks. When omitted a
                private ThreadingTaskScheduler is created and shut down
                with the manager.
            refresh_trigger: Renewal timing policy
        """
        self._authentication = authentication
        self._transport = transport
        self._owns_scheduler = scheduler is None
        self._scheduler: ProtocolTaskScheduler = scheduler or ThreadingTaskScheduler()
        self._refresh_trigger = refresh_trigger or ModelRefreshTrigger()
        self._lock = threading.Lock()
        self._token: ModelVaultToken | None = None
        self._state = EnumSessionState.NO_TOKEN
        self._scheduled: ProtocolScheduledTask | None = None

    @property
    def state(self) -> EnumSessionState:
        return self._state

    @property
    def token(self) -> ModelVaultToken | None:
        """Cached token, without triggering a login."""
        return self._token

    @property
    def refresh_trigger(self) -> ModelRefreshTrigger:
        return self._refresh_trigger

    def __enter__(self) -> LifecycleAwareSessionManager:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.destroy()

    def get_session_token(self) -> ModelVaultToken:
        """Return the cached token, logging in first if there is none.

        Raises:
            VaultAuthError: If login was rejected or the manager was destroyed.
            VaultTransportError: If Vault could not be reached for login.
        """
        token = self._token
        if token is not None:
            return token

        with self._lock:
            self._ensure_not_revoked()
            token = self._token
            if token is not None:
                return token

            try:
                token = self._authentication.login()
            except Exception:
                self._state = EnumSessionState.NO_TOKEN
                raise

            self._token = token
            self._state = EnumSessionState.ACTIVE
            logger.info(
                "Obtained Vault session token",
                extra={"token": token.describe()},
            )

        if token.is_renewable:
            self.schedule_renewal()
        return token

    def renew_token(self) -> bool:
        """Renew the cached token once.

        Returns:
            True if the token was renewed and is still usable. False if there
            was no token, the renewal failed or the renewed lease is at or
            below the trigger's minimum valid threshold. In the last two
            cases the token is discarded. Never raises.
        """
        with self._lock:
            token = self._token
            if token is None or self._state is EnumSessionState.REVOKED:
                return False
            self._state = EnumSessionState.RENEWING

        correlation_id = uuid4()
        logger.debug(
            "Renewing Vault token",
            extra={"token": token.describe(), "correlation_id": str(correlation_id)},
        )
        try:
            response = self._transport.renew_self(
                token.token, correlation_id=correlation_id
            )
            auth = response.get("auth") if response else None
            if not isinstance(auth, Mapping):
                raise ValueError("renew-self response has no 'auth' section")
            renewed = ModelVaultToken.from_auth(auth)
        except Exception as e:
            logger.warning(
                "Cannot renew Vault token, resetting token: %s",
                e,
                extra={
                    "error_type": type(e).__name__,
                    "correlation_id": str(correlation_id),
                },
            )
            self._discard(token)
            return False

        if renewed.accessor is None and token.accessor is not None:
            renewed = renewed.model_copy(update={"accessor": token.accessor})

        threshold = self._refresh_trigger.min_valid_threshold_seconds
        if renewed.lease_duration_seconds <= threshold:
            logger.warning(
                "Vault token TTL %ds is at or below the %.0fs threshold, "
                "discarding token",
                renewed.lease_duration_seconds,
                threshold,
                extra={"correlation_id": str(correlation_id)},
            )
            self._discard(token)
            return False

        with self._lock:
            if self._state is EnumSessionState.REVOKED:
                return False
            self._token = renewed
            self._state = EnumSessionState.ACTIVE
        logger.debug(
            "Renewed Vault token",
            extra={"token": renewed.describe(), "correlation_id": str(correlation_id)},
        )
        return True

    def schedule_renewal(self) -> None:
        """Schedule the next renewal of the cached token, replacing any pending one."""
        token = self._token
        if token is None or not token.is_renewable:
            return
        if self._state is EnumSessionState.REVOKED:
            return

        at = self._refresh_trigger.next_execution_time(token)
        previous = self._scheduled
        self._scheduled = self._scheduler.schedule(self._renewal_callback, at)
        if previous is not None:
            previous.cancel()
        logger.debug(
            "Scheduling Vault token renewal",
            extra={"renew_at": at.isoformat(), "token": token.describe()},
        )

    def _renewal_callback(self) -> None:
        token = self._token
        if token is None or not token.is_renewable:
            return
        if self.renew_token():
            self.schedule_renewal()

    def destroy(self) -> None:
        """Drop the token, cancel renewal and revoke a login token.

        Idempotent. Revoke failures are logged, never raised.
        """
        with self._lock:
            if self._state is EnumSessionState.REVOKED:
                return
            token = self._token
            self._token = None
            self._state = EnumSessionState.REVOKED
            scheduled = self._scheduled
            self._scheduled = None

        if scheduled is not None:
            scheduled.cancel()
        if self._owns_scheduler:
            self._scheduler.shutdown()

        if token is None or not token.is_login_token:
            return

        correlation_id = uuid4()
        try:
            self._transport.revoke_self(token.token, correlation_id=correlation_id)
            logger.info(
                "Revoked Vault session token",
                extra={"correlation_id": str(correlation_id)},
            )
        except RuntimeHostError as e:
            logger.warning(
                "Cannot revoke Vault session token: %s",
                e,
                extra={
                    "error_type": type(e).__name__,
                    "correlation_id": str(correlation_id),
                },
            )

    def _discard(self, token: ModelVaultToken) -> None:
        with self._lock:
            if self._state is EnumSessionState.REVOKED:
                return
            if self._token is token:
                self._token = None
                self._state = EnumSessionState.NO_TOKEN

    def _ensure_not_revoked(self) -> None:
        if self._state is EnumSessionState.REVOKED:
            raise VaultAuthError(
                "Vault session was destroyed",
                context=ModelInfraErrorContext(
                    transport_type=EnumInfraTransportType.VAULT,
                    operation="get_session_token",
                ),
            )


__all__: list[str] = ["LifecycleAwareSessionManager"]
