# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Vault response builders and a manual task scheduler for tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from pydantic import SecretStr

from omnibase_vault.models import ModelVaultToken


class ManualScheduledTask:
    """Scheduled task handle recorded by ManualTaskScheduler."""

    def __init__(self, callback: Callable[[], None], at: datetime) -> None:
        self.callback = callback
        self.at = at
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTaskScheduler:
    """Task scheduler that only fires callbacks when a test asks it to."""

    def __init__(self) -> None:
        self.tasks: list[ManualScheduledTask] = []
        self.shut_down = False

    def schedule(
        self, callback: Callable[[], None], at: datetime
    ) -> ManualScheduledTask:
        task = ManualScheduledTask(callback, at)
        self.tasks.append(task)
        return task

    def shutdown(self) -> None:
        self.shut_down = True

    @property
    def pending(self) -> list[ManualScheduledTask]:
        return [task for task in self.tasks if not task.cancelled]

    def run_pending(self) -> None:
        """Fire the tasks pending right now, not the ones they schedule."""
        for task in self.pending:
            task.cancelled = True
            task.callback()


def make_login_response(
    client_token: str = "s.session-token",
    accessor: str = "accessor-1",
    lease_duration: int = 3600,
    renewable: bool = True,
) -> dict[str, object]:
    """Vault login (or renew-self) response body."""
    return {
        "auth": {
            "client_token": client_token,
            "accessor": accessor,
            "lease_duration": lease_duration,
            "renewable": renewable,
            "policies": ["default"],
        }
    }


def make_wrapped_response(
    token: str = "s.wrapping-token",
    accessor: str = "wrapped-accessor-1",
    ttl: int = 600,
) -> dict[str, object]:
    """Vault response to a login sent with X-Vault-Wrap-TTL."""
    return {
        "auth": None,
        "wrap_info": {
            "token": token,
            "accessor": "wrapping-token-accessor",
            "ttl": ttl,
            "creation_path": "auth/approle/login",
            "wrapped_accessor": accessor,
        },
    }


def make_kv2_response(data: dict[str, object], version: int = 1) -> dict[str, object]:
    """KV v2 read response body."""
    return {
        "data": {
            "data": data,
            "metadata": {
                "created_time": "2025-01-01T00:00:00Z",
                "deletion_time": "",
                "destroyed": False,
                "version": version,
            },
        }
    }


def make_token(
    lease_duration: int = 3600,
    renewable: bool = True,
    is_login_token: bool = True,
    value: str = "s.session-token",
    issued_at: datetime | None = None,
) -> ModelVaultToken:
    token = ModelVaultToken(
        token=SecretStr(value),
        accessor="accessor-1",
        renewable=renewable,
        lease_duration_seconds=lease_duration,
        is_login_token=is_login_token,
    )
    if issued_at is not None:
        token = token.model_copy(update={"issued_at": issued_at})
    return token


__all__: list[str] = [
    "ManualScheduledTask",
    "ManualTaskScheduler",
    "make_kv2_response",
    "make_login_response",
    "make_token",
    "make_wrapped_response",
]
