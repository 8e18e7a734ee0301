# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Session token lifecycle: login, scheduled renewal, revoke on destroy."""

from omnibase_vault.session.protocol_task_scheduler import (
    ProtocolScheduledTask,
    ProtocolTaskScheduler,
)
from omnibase_vault.session.session_manager import LifecycleAwareSessionManager
from omnibase_vault.session.session_manager_builder import (
    create_authentication,
    create_session_manager,
)
from omnibase_vault.session.task_scheduler import ScheduledTask, ThreadingTaskScheduler

__all__: list[str] = [
    "LifecycleAwareSessionManager",
    "ProtocolScheduledTask",
    "ProtocolTaskScheduler",
    "ScheduledTask",
    "ThreadingTaskScheduler",
    "create_authentication",
    "create_session_manager",
]
