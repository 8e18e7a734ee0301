# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Log redaction for resolved secret values.

Every value the resolver produces is registered with a redaction sink before
it is substituted into build parameters. The default sink is a
``logging.Filter`` that masks registered values in rendered log messages.

Example:
    >>> redactor = RedactingLogFilter()
    >>> logging.getLogger().addFilter(redactor)
    >>> for handler in logging.getLogger().handlers:
    ...     handler.addFilter(redactor)
    >>> redactor.add_secret("hunter2")
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol, runtime_checkable

from omnibase_vault.utils import MASK, mask_secrets


@runtime_checkable
class ProtocolRedactionSink(Protocol):
    """Receives secret values that must never appear in output."""

    def add_secret(self, value: str) -> None:
        """Register ``value`` for masking."""
        ...


class RedactingLogFilter(logging.Filter):
    """Masks registered secrets in log records.

    The record's message is rendered with its args, masked, and stored back
    with the args cleared. Exception text is not rewritten.

    Thread Safety:
        Registration and filtering may run on different threads; the
        secret set is guarded by a lock.
    """

    def __init__(self, name: str = "", mask: str = MASK) -> None:
        super().__init__(name)
        self._mask = mask
        self._secrets: set[str] = set()
        self._lock = threading.Lock()

    def add_secret(self, value: str) -> None:
        if not value:
            return
        with self._lock:
            self._secrets.add(value)

    @property
    def secret_count(self) -> int:
        with self._lock:
            return len(self._secrets)

    def redact(self, text: str) -> str:
        with self._lock:
            secrets = tuple(self._secrets)
        return mask_secrets(text, secrets, self._mask)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        message = record.getMessage()
        redacted = self.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


__all__: list[str] = ["ProtocolRedactionSink", "RedactingLogFilter"]
