# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Substitution of Vault references in build parameters.

Orchestrates one resolution pass for one connection:
    1. Collect ``%vault:[id:]<query>%`` references from the parameters
    2. Parse them into queries (write-engine flag from settings)
    3. Obtain a session token
    4. Resolve all queries (one remote call per path)
    5. Substitute resolved values back into the parameters

Resolved values are registered with the redaction sink by the query
resolver before they are substituted.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from uuid import uuid4

from omnibase_vault.enums import EnumInfraTransportType
from omnibase_vault.errors import ModelInfraErrorContext, VaultResolutionError
from omnibase_vault.models import (
    ModelParameterResolution,
    ModelVaultFeatureSettings,
)
from omnibase_vault.resolver.query_resolver import VaultQueryResolver
from omnibase_vault.resolver.redaction import ProtocolRedactionSink
from omnibase_vault.resolver.references import (
    collect_references,
    get_path,
    substitute,
)
from omnibase_vault.session import (
    LifecycleAwareSessionManager,
    create_session_manager,
)
from omnibase_vault.transport import VaultTransport

logger = logging.getLogger(__name__)


class VaultParametersResolver:
    """Resolves the Vault references of one connection in a parameter set."""

    def __init__(
        self,
        settings: ModelVaultFeatureSettings,
        session_manager: LifecycleAwareSessionManager,
        query_resolver: VaultQueryResolver,
    ) -> None:
        self._settings = settings
        self._session_manager = session_manager
        self._query_resolver = query_resolver

    @classmethod
    def from_settings(
        cls,
        settings: ModelVaultFeatureSettings,
        redaction_sink: ProtocolRedactionSink | None = None,
        transport: VaultTransport | None = None,
    ) -> VaultParametersResolver:
        """Wire transport, session manager and query resolver for one connection.

        The caller owns the session manager's lifecycle through
        ``session_manager.destroy()``.
        """
        transport = transport or VaultTransport(settings)
        return cls(
            settings=settings,
            session_manager=create_session_manager(settings, transport),
            query_resolver=VaultQueryResolver(
                transport,
                write_engine_enabled=settings.write_engine_enabled,
                redaction_sink=redaction_sink,
            ),
        )

    @property
    def session_manager(self) -> LifecycleAwareSessionManager:
        return self._session_manager

    def resolve_parameters(
        self, parameters: Mapping[str, str]
    ) -> ModelParameterResolution:
        """Replace this connection's references in ``parameters``.

        Returns:
            The substituted parameters, the keys that changed and the
            failed references with their reasons.

        Raises:
            VaultResolutionError: If ``fail_on_error`` is set and any
                reference failed.
            VaultAuthError: If no session token could be obtained.
            VaultTransportError: If Vault could not be reached for login.
        """
        connection_id = self._settings.connection_id
        references = collect_references(parameters, connection_id)
        if not references:
            return ModelParameterResolution(parameters=dict(parameters))

        by_query: dict[str, list[str]] = {}
        for reference in references:
            by_query.setdefault(get_path(reference, connection_id), []).append(
                reference
            )

        replacements, query_errors = self._resolve(list(by_query))
        resolved = {
            reference: value
            for query, value in replacements.items()
            for reference in by_query[query]
        }
        errors = {
            reference: reason
            for query, reason in query_errors.items()
            for reference in by_query[query]
        }

        substituted = substitute(parameters, resolved)
        resolution = ModelParameterResolution(
            parameters=substituted,
            resolved_keys=sorted(
                key for key, value in substituted.items() if parameters[key] != value
            ),
            errors=errors,
        )
        self._check_errors(errors, "parameters")
        return resolution

    def resolve_remote_parameters(
        self, queries: Mapping[str, str]
    ) -> dict[str, str]:
        """Resolve explicitly declared remote parameters.

        Args:
            queries: Parameter key -> Vault query (``[WRITE:]<path>[!/<field>]``)

        Returns:
            Parameter key -> resolved value, for the keys that resolved.

        Raises:
            VaultResolutionError: If ``fail_on_error`` is set and any
                query failed.
        """
        if not queries:
            return {}
        replacements, query_errors = self._resolve(sorted(set(queries.values())))
        errors = {
            key: query_errors[query]
            for key, query in queries.items()
            if query in query_errors
        }
        self._check_errors(errors, "remote parameters")
        return {
            key: replacements[query]
            for key, query in queries.items()
            if query in replacements
        }

    def _resolve(
        self, raw_queries: list[str]
    ) -> tuple[dict[str, str], dict[str, str]]:
        correlation_id = uuid4()
        queries, errors = self._query_resolver.parse_all(raw_queries)
        if not queries:
            return {}, errors

        token = self._session_manager.get_session_token()
        result = self._query_resolver.resolve_all(
            queries, token.token, correlation_id=correlation_id
        )
        errors.update(result.errors)
        if errors:
            logger.warning(
                "Failed to resolve %d HashiCorp Vault reference(s)",
                len(errors),
                extra={
                    "connection_id": self._settings.connection_id,
                    "failed_references": sorted(errors),
                    "correlation_id": str(correlation_id),
                },
            )
        return dict(result.replacements), errors

    def _check_errors(self, errors: Mapping[str, str], what: str) -> None:
        if not errors or not self._settings.fail_on_error:
            return
        details = "; ".join(
            f"{ref}: {reason}" for ref, reason in sorted(errors.items())
        )
        raise VaultResolutionError(
            f"Failed to resolve {len(errors)} HashiCorp Vault {what}: {details}",
            context=ModelInfraErrorContext(
                transport_type=EnumInfraTransportType.VAULT,
                operation="resolve_parameters",
                namespace=self._settings.vault_namespace,
            ),
            errors=dict(errors),
        )


__all__: list[str] = ["VaultParametersResolver"]
