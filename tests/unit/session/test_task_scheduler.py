# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for the APScheduler-backed ThreadingTaskScheduler."""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta

import pytest

from omnibase_vault.errors import RuntimeHostError
from omnibase_vault.session import ThreadingTaskScheduler

pytestmark = [pytest.mark.unit]


class TestThreadingTaskScheduler:
    def test_fires_callback(self) -> None:
        scheduler = ThreadingTaskScheduler()
        fired = threading.Event()

        scheduler.schedule(fired.set, datetime.now(UTC))

        assert fired.wait(timeout=5)
        scheduler.shutdown()

    def test_cancel_prevents_callback(self) -> None:
        scheduler = ThreadingTaskScheduler()
        fired = threading.Event()

        task = scheduler.schedule(fired.set, datetime.now(UTC) + timedelta(seconds=1))
        task.cancel()

        assert not fired.wait(timeout=1.5)
        assert task.cancelled is True
        scheduler.shutdown()

    def test_callback_error_is_contained(self) -> None:
        scheduler = ThreadingTaskScheduler()
        done = threading.Event()

        def failing() -> None:
            done.set()
            raise RuntimeError("boom")

        scheduler.schedule(failing, datetime.now(UTC))

        assert done.wait(timeout=5)
        scheduler.shutdown()

    def test_shutdown_cancels_pending_and_refuses_new(self) -> None:
        scheduler = ThreadingTaskScheduler()
        task = scheduler.schedule(lambda: None, datetime.now(UTC) + timedelta(hours=1))

        scheduler.shutdown()

        assert task.cancelled is True
        assert scheduler.pending_count == 0
        with pytest.raises(RuntimeHostError):
            scheduler.schedule(lambda: None, datetime.now(UTC))

    def test_name_prefix(self) -> None:
        scheduler = ThreadingTaskScheduler(name_prefix="renewal")
        task = scheduler.schedule(lambda: None, datetime.now(UTC) + timedelta(hours=1))

        assert task.name.startswith("renewal-")
        scheduler.shutdown()

    def test_past_instant_fires_immediately(self) -> None:
        scheduler = ThreadingTaskScheduler()
        fired = threading.Event()

        scheduler.schedule(fired.set, datetime.now(UTC) - timedelta(minutes=5))

        assert fired.wait(timeout=5)
        scheduler.shutdown()

    def test_cancel_after_fire_is_noop(self) -> None:
        scheduler = ThreadingTaskScheduler()
        fired = threading.Event()

        task = scheduler.schedule(fired.set, datetime.now(UTC))
        assert fired.wait(timeout=5)

        task.cancel()

        assert task.cancelled is True
        assert scheduler.pending_count == 0
        scheduler.shutdown()

    def test_cancel_releases_pending_slot(self) -> None:
        scheduler = ThreadingTaskScheduler()
        task = scheduler.schedule(lambda: None, datetime.now(UTC) + timedelta(hours=1))
        assert scheduler.pending_count == 1

        task.cancel()

        assert scheduler.pending_count == 0
        scheduler.shutdown()

    def test_shutdown_before_first_schedule(self) -> None:
        scheduler = ThreadingTaskScheduler()

        scheduler.shutdown()

        with pytest.raises(RuntimeHostError, match="shut down"):
            scheduler.schedule(lambda: None, datetime.now(UTC))
