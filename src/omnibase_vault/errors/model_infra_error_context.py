# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Infrastructure Error Context Configuration Model.

Bundles the structured fields shared by every infrastructure error so that
error constructors keep a short signature.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from omnibase_vault.enums import EnumInfraTransportType


class ModelInfraErrorContext(BaseModel):
    """Structured context for infrastructure errors.

    Attributes:
        transport_type: Type of transport (VAULT, HTTP, RUNTIME)
        operation: Operation being performed (login, renew_token, read, ...)
        target_name: Target resource or endpoint name
        namespace: Vault Enterprise namespace, if any
        correlation_id: Request correlation ID for tracing

    Example:
        >>> context = ModelInfraErrorContext(
        ...     transport_type=EnumInfraTransportType.VAULT,
        ...     operation="read",
        ...     target_name="secret/data/app",
        ...     correlation_id=uuid4(),
        ... )
        >>> raise VaultTransportError("Read failed", context=context)
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    transport_type: Optional[EnumInfraTransportType] = Field(
        default=None,
        description="Type of infrastructure transport",
    )
    operation: Optional[str] = Field(
        default=None,
        description="Operation being performed",
    )
    target_name: Optional[str] = Field(
        default=None,
        description="Target resource or endpoint name",
    )
    namespace: Optional[str] = Field(
        default=None,
        description="Vault Enterprise namespace",
    )
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="Request correlation ID for distributed tracing",
    )


__all__ = ["ModelInfraErrorContext"]
