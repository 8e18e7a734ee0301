# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Infrastructure-Specific Error Classes.

Error Hierarchy:
    RuntimeHostError (base infrastructure error)
    ├── ProtocolConfigurationError
    ├── SecretResolutionError
    ├── InfraConnectionError
    └── InfraAuthenticationError

All errors:
    - Carry an EnumVaultErrorCode for classification
    - Support proper error chaining with `raise ... from e`
    - Include structured context for debugging
    - Accept ModelInfraErrorContext for bundled context parameters
"""

from typing import Optional
from uuid import UUID

from omnibase_vault.enums import EnumVaultErrorCode
from omnibase_vault.errors.model_infra_error_context import ModelInfraErrorContext


class RuntimeHostError(Exception):
    """Base error class for infrastructure errors.

    Structured Fields (via ModelInfraErrorContext):
        transport_type: Type of transport (vault, http, runtime)
        operation: Operation being performed
        correlation_id: Request correlation ID for tracking
        target_name: Target resource/endpoint name

    Example:
        >>> context = ModelInfraErrorContext(
        ...     transport_type=EnumInfraTransportType.VAULT,
        ...     operation="renew_token",
        ... )
        >>> raise RuntimeHostError("Operation failed", context=context, retry_count=3)
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[EnumVaultErrorCode] = None,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        """Initialize RuntimeHostError with structured fields.

        Args:
            message: Human-readable error message
            error_code: Error code (defaults to OPERATION_FAILED)
            context: Bundled infrastructure context
            **extra_context: Additional context information
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or EnumVaultErrorCode.OPERATION_FAILED

        structured_context: dict[str, object] = dict(extra_context)
        correlation_id: Optional[UUID] = None
        if context is not None:
            if context.transport_type is not None:
                structured_context["transport_type"] = context.transport_type
            if context.operation is not None:
                structured_context["operation"] = context.operation
            if context.target_name is not None:
                structured_context["target_name"] = context.target_name
            if context.namespace is not None:
                structured_context["namespace"] = context.namespace
            correlation_id = context.correlation_id

        self.correlation_id = correlation_id
        self.context: dict[str, object] = structured_context

    def __str__(self) -> str:
        return self.message


class ProtocolConfigurationError(RuntimeHostError):
    """Raised when configuration validation fails.

    Example:
        >>> raise ProtocolConfigurationError(
        ...     "Missing VAULT_ADDR",
        ...     context=ModelInfraErrorContext(operation="load_settings"),
        ... )
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumVaultErrorCode.INVALID_CONFIGURATION,
            context=context,
            **extra_context,
        )


class SecretResolutionError(RuntimeHostError):
    """Raised when a secret cannot be produced for a reference.

    Used for missing paths, missing fields and non-string values.
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        error_code: Optional[EnumVaultErrorCode] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code or EnumVaultErrorCode.RESOLUTION_ERROR,
            context=context,
            **extra_context,
        )


class InfraConnectionError(RuntimeHostError):
    """Raised when the remote service cannot be reached or keeps failing.

    Example:
        >>> raise InfraConnectionError(
        ...     "Vault unreachable",
        ...     context=context,
        ...     retry_count=5,
        ... )
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumVaultErrorCode.TRANSPORT_ERROR,
            context=context,
            **extra_context,
        )


class InfraAuthenticationError(RuntimeHostError):
    """Raised when authentication or authorization fails.

    Used for invalid credentials, expired tokens, insufficient permissions
    and consumed wrapping tokens.
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumVaultErrorCode.AUTHENTICATION_ERROR,
            context=context,
            **extra_context,
        )


__all__ = [
    "RuntimeHostError",
    "ProtocolConfigurationError",
    "SecretResolutionError",
    "InfraConnectionError",
    "InfraAuthenticationError",
]
