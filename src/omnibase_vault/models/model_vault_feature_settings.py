# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Vault connection settings.

Security Note:
    secret_id, password, token and wrapped_token are SecretStr so that a
    settings object can be logged or repr()'d without leaking credentials.
    Values should come from the environment, never from files checked into
    a repository.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
    field_validator,
    model_validator,
)

from omnibase_vault.enums import EnumInfraTransportType, EnumVaultAuthMethod
from omnibase_vault.errors import ModelInfraErrorContext, ProtocolConfigurationError
from omnibase_vault.models.model_vault_retry_config import ModelVaultRetryConfig

DEFAULT_WRAP_TTL: str = "10m"
DEFAULT_TOKEN_REFRESH_LEAD_SECONDS: float = 15.0

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


class ModelVaultFeatureSettings(BaseModel):
    """One Vault connection as configured for a build.

    The server side uses ``role_id``/``secret_id`` (AppRole) or
    ``username``/``password`` (LDAP) to log in, or signs a JWT for
    ``gcp_role`` with Google application default credentials (GCP IAM).
    The agent side only ever sees
    ``wrapped_token`` (or an injected ``token``).

    Attributes:
        connection_id: Reference namespace ("" is the default connection)
        url: Vault server URL
        vault_namespace: Vault Enterprise namespace (X-Vault-Namespace)
        auth_method: AppRole, LDAP or GCP IAM
        auth_mount_path: Mount path of the auth method, defaults per method
        gcp_role: Vault role bound to the GCP service account
        gcp_service_account: Service account that signs the login JWT,
            defaults to the one behind the application default credentials
        write_engine_enabled: Whether WRITE: references issue POSTs
        fail_on_error: Whether a failed reference fails the whole pass
        wrap_ttl: TTL of the response-wrapping envelope (X-Vault-Wrap-TTL)
        token_refresh_lead_seconds: Renew this long before the lease ends

    Example:
        >>> settings = ModelVaultFeatureSettings(
        ...     url="https://vault.example.com:8200",
        ...     role_id="build-role",
        ...     secret_id=SecretStr("s3cr3t"),
        ... )
        >>> settings.auth_mount_path
        'approle'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    connection_id: str = Field(default="", description="Reference namespace")
    url: str = Field(min_length=1, description="Vault server URL")
    vault_namespace: str | None = Field(default=None)
    auth_method: EnumVaultAuthMethod = Field(default=EnumVaultAuthMethod.APPROLE)
    auth_mount_path: str = Field(default="", description="Auth mount path")
    role_id: str | None = Field(default=None)
    secret_id: SecretStr | None = Field(default=None)
    username: str | None = Field(default=None)
    password: SecretStr | None = Field(default=None)
    gcp_role: str | None = Field(default=None)
    gcp_service_account: str | None = Field(default=None)
    wrapped_token: SecretStr | None = Field(default=None)
    token: SecretStr | None = Field(default=None)
    write_engine_enabled: bool = Field(default=False)
    fail_on_error: bool = Field(default=True)
    wrap_ttl: str = Field(default=DEFAULT_WRAP_TTL, min_length=1)
    token_refresh_lead_seconds: float = Field(
        default=DEFAULT_TOKEN_REFRESH_LEAD_SECONDS, ge=0.0
    )
    verify_ssl: bool = Field(default=True)
    ca_cert_path: str | None = Field(default=None)
    timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0)
    retry: ModelVaultRetryConfig = Field(default_factory=ModelVaultRetryConfig)

    @field_validator("url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @model_validator(mode="before")
    @classmethod
    def _default_mount_path(cls, data: object) -> object:
        if isinstance(data, dict):
            method = EnumVaultAuthMethod(
                data.get("auth_method") or EnumVaultAuthMethod.APPROLE
            )
            mount = str(data.get("auth_mount_path") or "").strip("/")
            data = {**data, "auth_mount_path": mount or method.value}
        return data

    @property
    def tls_verify(self) -> bool | str:
        """Value for hvac/requests ``verify``: a CA bundle path or a flag."""
        if self.verify_ssl and self.ca_cert_path:
            return self.ca_cert_path
        return self.verify_ssl

    @classmethod
    def from_environment(
        cls, environ: Mapping[str, str] | None = None
    ) -> ModelVaultFeatureSettings:
        """Build settings from ``VAULT_*`` environment variables.

        Raises:
            ProtocolConfigurationError: If a value is missing or invalid.
        """
        env = os.environ if environ is None else environ
        context = ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.RUNTIME,
            operation="load_settings",
        )

        url = env.get("VAULT_ADDR")
        if not url:
            raise ProtocolConfigurationError(
                "Missing VAULT_ADDR - Vault server URL required", context=context
            )

        values: dict[str, object] = {
            "url": url,
            "connection_id": env.get("VAULT_CONNECTION_ID", ""),
            "vault_namespace": env.get("VAULT_NAMESPACE") or None,
            "auth_method": env.get("VAULT_AUTH_METHOD", EnumVaultAuthMethod.APPROLE),
            "auth_mount_path": env.get("VAULT_AUTH_MOUNT", ""),
            "role_id": env.get("VAULT_ROLE_ID") or None,
            "username": env.get("VAULT_USERNAME") or None,
            "gcp_role": env.get("VAULT_GCP_ROLE") or None,
            "gcp_service_account": env.get("VAULT_GCP_SERVICE_ACCOUNT") or None,
            "write_engine_enabled": env.get("VAULT_WRITE_ENGINE_ENABLED", "").lower()
            in _TRUE_VALUES,
            "verify_ssl": env.get("VAULT_SKIP_VERIFY", "").lower() not in _TRUE_VALUES,
            "ca_cert_path": env.get("VAULT_CACERT") or None,
        }
        if "VAULT_FAIL_ON_ERROR" in env:
            values["fail_on_error"] = env["VAULT_FAIL_ON_ERROR"].lower() in _TRUE_VALUES
        if env.get("VAULT_WRAP_TTL"):
            values["wrap_ttl"] = env["VAULT_WRAP_TTL"]
        for env_name, field_name in (
            ("VAULT_SECRET_ID", "secret_id"),
            ("VAULT_PASSWORD", "password"),
            ("VAULT_TOKEN", "token"),
            ("VAULT_WRAPPED_TOKEN", "wrapped_token"),
        ):
            if env.get(env_name):
                values[field_name] = SecretStr(env[env_name])

        try:
            if env.get("VAULT_TOKEN_REFRESH_LEAD_SECONDS"):
                values["token_refresh_lead_seconds"] = float(
                    env["VAULT_TOKEN_REFRESH_LEAD_SECONDS"]
                )
            retry: dict[str, object] = {}
            if env.get("VAULT_MAX_ATTEMPTS"):
                retry["max_attempts"] = int(env["VAULT_MAX_ATTEMPTS"])
            if env.get("VAULT_RETRY_DELAY_SECONDS"):
                retry["initial_backoff_seconds"] = float(
                    env["VAULT_RETRY_DELAY_SECONDS"]
                )
            if retry:
                values["retry"] = ModelVaultRetryConfig.model_validate(retry)
            return cls.model_validate(values)
        except (ValidationError, ValueError) as e:
            raise ProtocolConfigurationError(
                f"Invalid Vault configuration: {e}", context=context
            ) from e


__all__: list[str] = [
    "DEFAULT_TOKEN_REFRESH_LEAD_SECONDS",
    "DEFAULT_WRAP_TTL",
    "ModelVaultFeatureSettings",
]
