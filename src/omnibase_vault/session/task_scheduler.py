# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""APScheduler implementation of ProtocolTaskScheduler.

Each renewal is a one-shot ``DateTrigger`` job on a ``BackgroundScheduler``.
The scheduler thread is started on the first ``schedule`` call, so a session
manager that never renews never starts a thread.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from datetime import datetime

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

from omnibase_vault.enums import EnumInfraTransportType
from omnibase_vault.errors import ModelInfraErrorContext, RuntimeHostError

logger = logging.getLogger(__name__)


class ScheduledTask:
    """Cancellable handle around an APScheduler ``Job``."""

    def __init__(self, job: Job, on_cancel: Callable[[str], None]) -> None:
        self._job = job
        self._on_cancel = on_cancel
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def name(self) -> str:
        return str(self._job.name)

    @property
    def id(self) -> str:
        return str(self._job.id)

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        try:
            self._job.remove()
        except JobLookupError:
            # already fired or removed by shutdown
            pass
        self._on_cancel(self.id)


class ThreadingTaskScheduler:
    """Runs each callback once on APScheduler's worker pool.

    Callback exceptions are logged and do not propagate; the renewal chain
    decides on its own whether to reschedule. Instants in the past fire
    immediately because jobs have no misfire grace limit.
    """

    def __init__(self, name_prefix: str = "vault-session-renewal") -> None:
        self._name_prefix = name_prefix
        self._scheduler = BackgroundScheduler(
            timezone="UTC",
            job_defaults={"misfire_grace_time": None, "coalesce": True},
        )
        self._lock = threading.Lock()
        self._pending: dict[str, ScheduledTask] = {}
        self._counter = itertools.count(1)
        self._shutdown = False

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def schedule(self, callback: Callable[[], None], at: datetime) -> ScheduledTask:
        """Schedule ``callback`` at ``at``.

        Raises:
            RuntimeHostError: If the scheduler was shut down.
        """
        with self._lock:
            if self._shutdown:
                raise RuntimeHostError(
                    "Task scheduler is shut down",
                    context=ModelInfraErrorContext(
                        transport_type=EnumInfraTransportType.RUNTIME,
                        operation="schedule",
                    ),
                )
            if not self._scheduler.running:
                self._scheduler.start()
            job_id = f"{self._name_prefix}-{next(self._counter)}"
            # _run blocks on the lock until the handle is registered
            job = self._scheduler.add_job(
                self._run,
                trigger=DateTrigger(run_date=at),
                args=[callback, job_id],
                id=job_id,
                name=job_id,
            )
            task = ScheduledTask(job, self._forget)
            self._pending[job_id] = task
        logger.debug(
            "Scheduled task %s",
            task.name,
            extra={"scheduled_at": at.isoformat()},
        )
        return task

    def _forget(self, job_id: str) -> None:
        with self._lock:
            self._pending.pop(job_id, None)

    def _run(self, callback: Callable[[], None], job_id: str) -> None:
        with self._lock:
            task = self._pending.pop(job_id, None)
        if task is None or task.cancelled:
            return
        try:
            callback()
        except Exception:
            logger.exception("Scheduled task %s failed", job_id)

    def shutdown(self) -> None:
        with self._lock:
            self._shutdown = True
            pending = list(self._pending.values())
        for task in pending:
            task.cancel()
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)


__all__: list[str] = ["ScheduledTask", "ThreadingTaskScheduler"]
