# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""
Vault Build-Secret Broker CLI Commands.

Configuration comes from ``VAULT_*`` environment variables (see
ModelVaultFeatureSettings.from_environment). Server-side commands use the
long-term credentials; ``resolve`` is the agent side and normally runs with
``VAULT_WRAPPED_TOKEN`` only.
"""

from __future__ import annotations

import json
import logging
from typing import TextIO

import click
from rich.console import Console
from rich.table import Table

from omnibase_vault.errors import RuntimeHostError, VaultResolutionError
from omnibase_vault.handoff import TokenHandoffProtocol
from omnibase_vault.models import ModelLeasedTokenInfo, ModelVaultFeatureSettings
from omnibase_vault.resolver import RedactingLogFilter, VaultParametersResolver
from omnibase_vault.transport import VaultTransport

console = Console()
err_console = Console(stderr=True)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """HashiCorp Vault build-secret broker."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    redactor = RedactingLogFilter()
    for handler in logging.getLogger().handlers:
        handler.addFilter(redactor)
    ctx.obj = redactor


def _load_settings() -> ModelVaultFeatureSettings:
    try:
        return ModelVaultFeatureSettings.from_environment()
    except RuntimeHostError as e:
        err_console.print(f"[red]Configuration error: {e}[/red]")
        raise SystemExit(2) from e


def _fail(e: RuntimeHostError) -> SystemExit:
    err_console.print(
        f"[bold red]{type(e).__name__}:[/bold red] {e} "
        f"[dim](correlation_id={e.correlation_id})[/dim]"
    )
    return SystemExit(1)


@cli.command("health")
def health_cmd() -> None:
    """Show Vault server health."""
    settings = _load_settings()
    transport = VaultTransport(settings)
    try:
        health = transport.health()
    except RuntimeHostError as e:
        raise _fail(e) from e
    finally:
        transport.close()

    table = Table(title=f"Vault Health ({settings.url})")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="bold")
    table.add_row("Initialized", str(health.initialized))
    table.add_row("Sealed", str(health.sealed))
    table.add_row("Standby", str(health.standby))
    table.add_row("Version", health.version or "-")
    table.add_row("Cluster", health.cluster_name or "-")
    console.print(table)
    raise SystemExit(0 if health.is_available else 1)


@cli.command("request-token")
def request_token_cmd() -> None:
    """Log in with server credentials and print a wrapped token envelope."""
    settings = _load_settings()
    with TokenHandoffProtocol() as handoff:
        try:
            envelope = handoff.request_wrapped_token(settings)
        except RuntimeHostError as e:
            raise _fail(e) from e
    click.echo(
        json.dumps(
            {
                "wrapped_token": envelope.wrapped_token.get_secret_value(),
                "accessor": envelope.accessor,
                "ttl_seconds": envelope.ttl_seconds,
            }
        )
    )


@cli.command("revoke")
@click.option("--accessor", required=True, help="Accessor of the token to revoke")
def revoke_cmd(accessor: str) -> None:
    """Revoke an issued token through its accessor."""
    settings = _load_settings()
    info = ModelLeasedTokenInfo(accessor=accessor, settings=settings)
    with TokenHandoffProtocol() as handoff:
        revoked = handoff.revoke(info)
    if revoked:
        console.print(f"[green]Revoked token with accessor {accessor}[/green]")
        raise SystemExit(0)
    err_console.print(f"[red]Failed to revoke token with accessor {accessor}[/red]")
    raise SystemExit(1)


@cli.command("resolve")
@click.argument("params_json", type=click.File("r"))
@click.option(
    "--output",
    "-o",
    type=click.File("w"),
    default="-",
    help="Where to write the resolved parameters (default: stdout)",
)
@click.pass_obj
def resolve_cmd(
    redactor: RedactingLogFilter, params_json: TextIO, output: TextIO
) -> None:
    """Resolve %vault:...% references in a JSON object of parameters."""
    try:
        raw = json.load(params_json)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON in {params_json.name}: {e}") from e
    if not isinstance(raw, dict) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in raw.items()
    ):
        raise click.ClickException("Parameters must be a JSON object of strings")

    settings = _load_settings()
    resolver = VaultParametersResolver.from_settings(settings, redaction_sink=redactor)
    try:
        resolution = resolver.resolve_parameters(raw)
    except VaultResolutionError as e:
        _print_errors(e.errors)
        raise _fail(e) from e
    except RuntimeHostError as e:
        raise _fail(e) from e
    finally:
        resolver.session_manager.destroy()

    json.dump(resolution.parameters, output, indent=2, sort_keys=True)
    output.write("\n")
    if resolution.errors:
        _print_errors(resolution.errors)
    err_console.print(
        f"[bold]Resolved {len(resolution.resolved_keys)} parameter(s)[/bold]"
    )


def _print_errors(errors: dict[str, str]) -> None:
    table = Table(title="Unresolved References")
    table.add_column("Reference", style="cyan")
    table.add_column("Reason", style="red")
    for reference, reason in sorted(errors.items()):
        table.add_row(reference, reason)
    err_console.print(table)


__all__: list[str] = ["cli"]
