# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Resolution of parsed Vault queries into secret values.

Queries are grouped by ``(path, is_write_engine)`` and each group is served
by exactly one remote call, however many fields are requested from it.
Groups target independent paths and are fetched in parallel.

Response Interpretation:
    - The secret is the ``data`` object of the Vault response
    - KV v2 payloads (``data`` and ``metadata`` maps, with metadata carrying
      created_time, deletion_time, destroyed and version) are unwrapped one
      more level
    - With a field: that exact key if present, otherwise the field is a
      JsonPath expression (``$.`` prefix optional) evaluated against the
      secret; the first match wins
    - Without a field: the ``value`` key, else the only key of a
      single-entry secret, else a resolution error
    - Only string values are accepted

Failure Policy:
    Failures are collected per reference; one bad reference never aborts
    the others and never resolves to an empty string.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from uuid import UUID, uuid4

from jsonpath_ng.exceptions import JSONPathError
from jsonpath_ng.ext import parse as parse_json_path
from jsonpath_ng.jsonpath import JSONPath
from pydantic import SecretStr

from omnibase_vault.errors import (
    RuntimeHostError,
    VaultNotFoundError,
    VaultResolutionError,
)
from omnibase_vault.models import ModelResolvingResult, ModelVaultQuery
from omnibase_vault.resolver.redaction import ProtocolRedactionSink
from omnibase_vault.transport import VaultTransport

logger = logging.getLogger(__name__)

DATA_KEY: str = "data"
METADATA_KEY: str = "metadata"
VALUE_KEY: str = "value"
JSON_PATH_ROOT: str = "$."

_KV2_METADATA_KEYS = frozenset(
    {"created_time", "deletion_time", "destroyed", "version"}
)

GroupKey = tuple[str, bool]


class _ExtractionError(Exception):
    """A single reference could not be extracted from its group's response."""


@lru_cache(maxsize=256)
def _compile_json_path(expression: str) -> JSONPath:
    try:
        return parse_json_path(expression)
    except JSONPathError as e:
        raise _ExtractionError(
            f"JsonPath compilation failed for '{expression}': {e}"
        ) from e


class _GroupOutcome:
    """Response (or failure message) of one group's remote call."""

    __slots__ = ("data", "error")

    def __init__(
        self, data: Mapping[str, object] | None = None, error: str | None = None
    ) -> None:
        self.data = data
        self.error = error


def is_kv2_data(data: Mapping[str, object]) -> bool:
    """Whether ``data`` looks like a KV v2 read payload."""
    inner = data.get(DATA_KEY)
    metadata = data.get(METADATA_KEY)
    if not isinstance(inner, Mapping) or not isinstance(metadata, Mapping):
        return False
    return _KV2_METADATA_KEYS.issubset(metadata.keys())


def unwrap_kv2(data: Mapping[str, object]) -> Mapping[str, object]:
    inner = data.get(DATA_KEY)
    if isinstance(inner, Mapping) and is_kv2_data(data):
        return inner
    return data


class VaultQueryResolver:
    """Parses references and resolves them against Vault.

    Example:
        >>> resolver = VaultQueryResolver(transport, write_engine_enabled=True)
        >>> queries = [resolver.parse("/secret/data/app!/user"),
        ...            resolver.parse("/secret/data/app!/password")]
        >>> result = resolver.resolve_all(queries, token.token)
        >>> result.replacements["/secret/data/app!/user"]
    """

    def __init__(
        self,
        transport: VaultTransport,
        write_engine_enabled: bool = False,
        redaction_sink: ProtocolRedactionSink | None = None,
        max_workers: int = 4,
    ) -> None:
        """Initialize the resolver.

        Args:
            transport: Transport used for reads and writes
            write_engine_enabled: Whether ``WRITE:`` references issue writes
            redaction_sink: Receives every resolved value
            max_workers: Upper bound on groups fetched in parallel
        """
        self._transport = transport
        self._write_engine_enabled = write_engine_enabled
        self._redaction_sink = redaction_sink
        self._max_workers = max_workers

    @property
    def write_engine_enabled(self) -> bool:
        return self._write_engine_enabled

    def parse(self, reference: str) -> ModelVaultQuery:
        """Parse one reference with this resolver's write-engine flag."""
        return ModelVaultQuery.parse(reference, self._write_engine_enabled)

    def parse_all(
        self, references: Iterable[str]
    ) -> tuple[list[ModelVaultQuery], dict[str, str]]:
        """Parse references, collecting parse failures per reference."""
        queries: list[ModelVaultQuery] = []
        errors: dict[str, str] = {}
        for reference in references:
            try:
                queries.append(self.parse(reference))
            except VaultResolutionError as e:
                errors[reference] = e.message
        return queries, errors

    def resolve_all(
        self,
        queries: Iterable[ModelVaultQuery],
        token: SecretStr | str,
        correlation_id: UUID | None = None,
    ) -> ModelResolvingResult:
        """Resolve every query with one remote call per distinct group.

        Returns:
            Values and per-reference errors keyed by the original reference.
        """
        correlation_id = correlation_id or uuid4()
        groups: dict[GroupKey, list[ModelVaultQuery]] = defaultdict(list)
        for query in queries:
            groups[query.group_key].append(query)
        if not groups:
            return ModelResolvingResult()

        keys = list(groups)
        if len(keys) == 1:
            outcomes = [self._fetch_group(keys[0], token, correlation_id)]
        else:
            with ThreadPoolExecutor(
                max_workers=min(self._max_workers, len(keys)),
                thread_name_prefix="vault-resolve",
            ) as executor:
                outcomes = list(
                    executor.map(
                        lambda key: self._fetch_group(key, token, correlation_id),
                        keys,
                    )
                )

        replacements: dict[str, str] = {}
        errors: dict[str, str] = {}
        for key, outcome in zip(keys, outcomes, strict=True):
            for query in groups[key]:
                if outcome.error is not None:
                    errors[query.reference] = (
                        f"Failed to fetch data for path {query.reference}: "
                        f"{outcome.error}"
                    )
                    continue
                try:
                    value = self._extract(outcome.data, query)
                except _ExtractionError as e:
                    logger.warning(
                        "Cannot resolve Vault reference: %s",
                        e,
                        extra={
                            "path": query.path,
                            "correlation_id": str(correlation_id),
                        },
                    )
                    errors[query.reference] = str(e)
                    continue
                if self._redaction_sink is not None:
                    self._redaction_sink.add_secret(value)
                replacements[query.reference] = value

        logger.info(
            "Resolved %d of %d Vault references using %d remote calls",
            len(replacements),
            len(replacements) + len(errors),
            len(keys),
            extra={"correlation_id": str(correlation_id)},
        )
        return ModelResolvingResult(replacements=replacements, errors=errors)

    def _fetch_group(
        self, key: GroupKey, token: SecretStr | str, correlation_id: UUID
    ) -> _GroupOutcome:
        path, is_write = key
        try:
            if is_write:
                response = self._transport.write(
                    path, token, correlation_id=correlation_id
                )
            else:
                response = self._transport.read(
                    path, token, correlation_id=correlation_id
                )
        except VaultNotFoundError as e:
            if is_write:
                logger.warning(
                    "Write engine path not found",
                    extra={"path": path, "correlation_id": str(correlation_id)},
                )
                return _GroupOutcome(error=e.message)
            return _GroupOutcome(data=None)
        except RuntimeHostError as e:
            logger.warning(
                "Failed to fetch data for path '%s': %s",
                path,
                e,
                extra={
                    "error_type": type(e).__name__,
                    "correlation_id": str(correlation_id),
                },
            )
            return _GroupOutcome(error=e.message)

        data = response.get(DATA_KEY) if response else None
        return _GroupOutcome(data=data if isinstance(data, Mapping) else None)

    def _extract(
        self, data: Mapping[str, object] | None, query: ModelVaultQuery
    ) -> str:
        if not data:
            raise _ExtractionError(
                f"There's no data in HashiCorp Vault response for '{query.path}'"
            )
        secret = unwrap_kv2(data)

        if query.field is None:
            if VALUE_KEY in secret:
                key = VALUE_KEY
            elif len(secret) == 1:
                key = next(iter(secret))
            else:
                raise _ExtractionError(
                    f"'{VALUE_KEY}' is missing in HashiCorp Vault response for "
                    f"'{query.path}' and the secret has {len(secret)} keys, "
                    "specify a field"
                )
            return self._require_string(secret[key], key, query)

        value = self._lookup(secret, query.field)
        if value is None:
            raise _ExtractionError(
                f"'{query.field}' found nothing for '{query.path}'"
            )
        return self._require_string(value, query.field, query)

    @staticmethod
    def _lookup(secret: Mapping[str, object], field: str) -> object | None:
        key = field.removeprefix(JSON_PATH_ROOT)
        if key in secret:
            return secret[key]
        expression = field if field.startswith("$") else JSON_PATH_ROOT + field
        matches = _compile_json_path(expression).find(secret)
        return matches[0].value if matches else None

    @staticmethod
    def _require_string(value: object, key: str, query: ModelVaultQuery) -> str:
        if not isinstance(value, str):
            raise _ExtractionError(
                f"Cannot extract data from non-string '{key}'. Actual type is "
                f"{type(value).__name__} for '{query.path}'"
            )
        return value


__all__: list[str] = [
    "VaultQueryResolver",
    "is_kv2_data",
    "unwrap_kv2",
]
