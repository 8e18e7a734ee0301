# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Structured form of a secret reference.

Reference syntax::

    [WRITE:]<path>[!/<field>]

``WRITE:`` marks a dynamic-secret (write engine) query. It is honoured only
when the write-engine flag is enabled for the connection; otherwise it is
stripped and the query is a plain read.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from omnibase_vault.enums import EnumInfraTransportType
from omnibase_vault.errors import ModelInfraErrorContext, VaultResolutionError

WRITE_PREFIX: str = "WRITE:"
FIELD_SEPARATOR: str = "!/"


class ModelVaultQuery(BaseModel):
    """A parsed secret reference.

    Attributes:
        reference: The raw string the query was parsed from
        path: Vault path, never empty
        field: Field to extract, None for "whole value / value convention"
        is_write_engine: Whether the path is written to (POST) instead of read
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    reference: str = Field(description="Raw reference string")
    path: str = Field(min_length=1, description="Vault path")
    field: str | None = Field(default=None, description="Field to extract")
    is_write_engine: bool = Field(default=False)

    @property
    def group_key(self) -> tuple[str, bool]:
        """Queries sharing this key are served by a single remote call."""
        return (self.vault_path, self.is_write_engine)

    @property
    def vault_path(self) -> str:
        """Path as sent to Vault (no leading slash)."""
        return self.path.lstrip("/")

    @classmethod
    def parse(
        cls, reference: str, write_engine_enabled: bool = False
    ) -> ModelVaultQuery:
        """Parse a raw reference.

        Splits on the last ``!/``; everything before it is the path and
        everything after it is the field.

        Args:
            reference: Raw reference string
            write_engine_enabled: Whether ``WRITE:`` turns the query into a write

        Raises:
            VaultResolutionError: If the path part is empty.
        """
        remainder = reference
        is_write = False
        if remainder.startswith(WRITE_PREFIX):
            remainder = remainder[len(WRITE_PREFIX) :]
            is_write = write_engine_enabled

        path, separator, field = remainder.rpartition(FIELD_SEPARATOR)
        if not separator:
            path, field = remainder, ""

        if not path.strip("/"):
            raise VaultResolutionError(
                f"Empty Vault path in reference '{reference}'",
                context=ModelInfraErrorContext(
                    transport_type=EnumInfraTransportType.RUNTIME,
                    operation="parse_reference",
                ),
                errors={reference: "Empty Vault path"},
            )

        return cls(
            reference=reference,
            path=path,
            field=field or None,
            is_write_engine=is_write,
        )


__all__: list[str] = ["FIELD_SEPARATOR", "WRITE_PREFIX", "ModelVaultQuery"]
