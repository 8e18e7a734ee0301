# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Protocol for the one-shot task scheduler used by token renewal."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class ProtocolScheduledTask(Protocol):
    """Handle of a scheduled callback."""

    def cancel(self) -> None:
        """Prevent the callback from firing. No-op if it already ran."""
        ...


@runtime_checkable
class ProtocolTaskScheduler(Protocol):
    """Fires a callback once at an absolute wall-clock time."""

    def schedule(
        self, callback: Callable[[], None], at: datetime
    ) -> ProtocolScheduledTask:
        """Schedule ``callback`` to run at ``at`` (timezone-aware)."""
        ...

    def shutdown(self) -> None:
        """Cancel every pending callback and refuse new ones."""
        ...


__all__: list[str] = ["ProtocolScheduledTask", "ProtocolTaskScheduler"]
