# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Login request construction and login error readability.

Shared by the auth method implementations and the server-side token
handoff, which performs the same login with and without response wrapping.
"""

from __future__ import annotations

from uuid import UUID

from omnibase_vault.enums import EnumInfraTransportType, EnumVaultAuthMethod
from omnibase_vault.errors import (
    ModelInfraErrorContext,
    ProtocolConfigurationError,
    VaultAuthError,
    VaultTransportError,
)
from omnibase_vault.models import ModelVaultFeatureSettings
from omnibase_vault.utils import MASK, mask_secrets


_VALIDATION_PREFIXES: tuple[str, ...] = (
    "failed to validate credentials: ",
    "failed to validate SecretID: ",
)


def login_path(settings: ModelVaultFeatureSettings) -> str:
    """Login endpoint of the configured auth method, without credentials."""
    mount = settings.auth_mount_path
    if settings.auth_method is EnumVaultAuthMethod.LDAP:
        return f"auth/{mount}/login/{settings.username or ''}"
    return f"auth/{mount}/login"


def build_login_request(
    settings: ModelVaultFeatureSettings,
    jwt: str | None = None,
) -> tuple[str, dict[str, object]]:
    """Login path and JSON body for the configured auth method.

    Args:
        settings: Connection settings holding the credentials
        jwt: Signed JWT, required by the GCP IAM method only

    Raises:
        ProtocolConfigurationError: If the method's credentials are missing.
    """
    mount = settings.auth_mount_path
    context = ModelInfraErrorContext(
        transport_type=EnumInfraTransportType.VAULT,
        operation="login",
        target_name=f"auth/{mount}",
    )
    if settings.auth_method is EnumVaultAuthMethod.LDAP:
        if not settings.username or settings.password is None:
            raise ProtocolConfigurationError(
                "LDAP login requires username and password", context=context
            )
        return (
            f"auth/{mount}/login/{settings.username}",
            {"password": settings.password.get_secret_value()},
        )

    if settings.auth_method is EnumVaultAuthMethod.GCP_IAM:
        if not settings.gcp_role:
            raise ProtocolConfigurationError(
                "GCP IAM login requires gcp_role", context=context
            )
        if not jwt:
            raise ProtocolConfigurationError(
                "GCP IAM login requires a signed JWT", context=context
            )
        return f"auth/{mount}/login", {"role": settings.gcp_role, "jwt": jwt}

    if not settings.role_id:
        raise ProtocolConfigurationError(
            "AppRole login requires role_id", context=context
        )
    body: dict[str, object] = {"role_id": settings.role_id}
    if settings.secret_id is not None:
        body["secret_id"] = settings.secret_id.get_secret_value()
    return f"auth/{mount}/login", body


def credential_value(settings: ModelVaultFeatureSettings) -> str | None:
    """The secret half of the credential pair, used for masking messages."""
    if settings.auth_method is EnumVaultAuthMethod.GCP_IAM:
        return None
    secret = (
        settings.password
        if settings.auth_method is EnumVaultAuthMethod.LDAP
        else settings.secret_id
    )
    return secret.get_secret_value() if secret is not None else None


def readable_login_message(
    method: EnumVaultAuthMethod,
    vault_message: str,
    credential: str | None = None,
) -> str:
    """Rewrite a Vault login rejection into something a user can act on.

    Example:
        >>> readable_login_message(
        ...     EnumVaultAuthMethod.APPROLE,
        ...     "failed to validate credentials: invalid secret_id",
        ... )
        'Cannot log in to HashiCorp Vault using APPROLE method, SecretID is incorrect or expired'
    """
    prefix = f"Cannot log in to HashiCorp Vault using {method.name} method"
    message = f"{prefix}: {vault_message}"
    for validation_prefix in _VALIDATION_PREFIXES:
        if not vault_message.startswith(validation_prefix):
            continue
        detail = vault_message.removeprefix(validation_prefix)
        if "invalid secret_id" in detail:
            message = f"{prefix}, SecretID is incorrect or expired"
        elif "failed to find secondary index for role_id" in detail:
            message = f"{prefix}, RoleID is incorrect or there's no such role"
        break
    if credential:
        message = mask_secrets(message, [credential])
    return message


def login_failure(
    error: VaultTransportError | VaultAuthError,
    settings: ModelVaultFeatureSettings,
    path: str,
    correlation_id: UUID | None = None,
) -> VaultAuthError | VaultTransportError:
    """Map a failed login call onto the error the caller should see.

    4xx rejections become VaultAuthError with a readable message. Transport
    failures (5xx after retries, I/O) are returned unchanged.
    """
    status = error.status_code
    if isinstance(error, VaultTransportError) and (status is None or status >= 500):
        return error
    vault_message = error.vault_message or error.message
    return VaultAuthError(
        readable_login_message(
            settings.auth_method, vault_message, credential_value(settings)
        ),
        context=ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.VAULT,
            operation="login",
            target_name=path,
            namespace=settings.vault_namespace,
            correlation_id=correlation_id,
        ),
        path=path,
        status_code=status,
    )


__all__: list[str] = [
    "MASK",
    "build_login_request",
    "credential_value",
    "login_failure",
    "login_path",
    "readable_login_message",
]
