"""Command line entry point for inspecting provider settings resolution."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from nemoprefs import __version__
from nemoprefs.core.config import RuntimeSettings, load_runtime_settings
from nemoprefs.core.providers.defaults import MOCK_CATALOG
from nemoprefs.core.providers.types import Provider
from nemoprefs.core.providers.validation import validate_providers_config
from nemoprefs.core.settings_reader import ProviderSettingsReader
from nemoprefs.utils.log import get_logger, init_logger

console = Console()
logger = get_logger()


def _masked(provider: Provider, show_secrets: bool) -> Dict[str, Any]:
    payload = provider.to_payload()
    if payload.get("apiKey") and not show_secrets:
        payload["apiKey"] = "***"
    return payload


def _reader(ctx: click.Context) -> ProviderSettingsReader:
    settings: RuntimeSettings = ctx.obj["settings"]
    return ProviderSettingsReader.from_settings(settings)


@click.group()
@click.version_option(version=__version__)
@click.option("--dev", is_flag=True, help="Enable development mode (mock providers)")
@click.option(
    "--preferences-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Preferences JSON file read as the primary store",
)
@click.option(
    "--storage-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Key-value JSON file read as the fallback store",
)
@click.pass_context
def cli(
    ctx: click.Context,
    dev: bool,
    preferences_file: Optional[Path],
    storage_file: Optional[Path],
) -> None:
    """Nemoprefs - inspect which AI provider Nemo would use"""
    settings = load_runtime_settings()
    updates: Dict[str, Any] = {}
    if dev:
        updates["development_mode"] = True
    if preferences_file is not None:
        updates["preferences_path"] = preferences_file
    if storage_file is not None:
        updates["storage_path"] = storage_file
    if updates:
        settings = settings.model_copy(update=updates)

    if settings.log_dir is not None:
        init_logger(settings.log_dir)
    logger.debug(
        "[cli] Starting CLI invocation",
        extra={
            "preferences_path": str(settings.preferences_path),
            "storage_path": str(settings.storage_path),
            "development_mode": settings.development_mode,
        },
    )
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command(name="default")
@click.option("--json", "as_json", is_flag=True, help="Print the provider as JSON")
@click.option("--show-secrets", is_flag=True, help="Do not mask the API key")
@click.pass_context
def default_cmd(ctx: click.Context, as_json: bool, show_secrets: bool) -> None:
    """Show the provider that would be used by default"""
    provider = asyncio.run(_reader(ctx).read_default_provider())
    payload = _masked(provider, show_secrets)
    if as_json:
        click.echo(json.dumps(payload, indent=2))
        return

    console.print(f"\n[bold]Default Provider[/bold]: {escape(provider.name)}\n")
    console.print(f"ID: {escape(provider.id)}")
    console.print(f"Type: {provider.type.value}")
    console.print(f"Built-in: {provider.is_built_in}")
    console.print(f"Model: {escape(provider.model_id or 'Not set')}")
    console.print(f"Base URL: {escape(provider.base_url or 'Not set')}")
    console.print(f"API Key: {'***' if provider.api_key else 'Not set'}\n")


@cli.command(name="providers")
@click.option("--json", "as_json", is_flag=True, help="Print the configuration as JSON")
@click.pass_context
def providers_cmd(ctx: click.Context, as_json: bool) -> None:
    """List all configured providers"""
    config = asyncio.run(_reader(ctx).read_all_providers())
    if as_json:
        payload = config.to_payload()
        payload["providers"] = [_masked(provider, False) for provider in config.providers]
        click.echo(json.dumps(payload, indent=2))
        return

    table = Table(title="Providers")
    table.add_column("Default")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Model")
    for provider in config.providers:
        table.add_row(
            "*" if provider.is_default else "",
            escape(provider.id),
            escape(provider.name),
            provider.type.value,
            escape(provider.model_id or "-"),
        )
    console.print(table)


@cli.command(name="validate")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def validate_cmd(path: Path) -> None:
    """Validate a providers configuration JSON file"""
    try:
        data = json.loads(path.read_bytes().decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise click.ClickException(f"{path} is not UTF-8 text: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"{path} does not contain valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise click.ClickException(
            f"{path} contains JSON {type(data).__name__}, expected an object"
        )

    validated = validate_providers_config(data)
    if not validated.ok:
        raise click.ClickException(f"Invalid providers configuration: {validated.reason}")

    config = validated.value
    console.print(
        f"[green]Valid[/green]: {len(config.providers)} providers, "
        f"default '{escape(config.default_provider_id)}'"
    )
    if config.default_provider is None:
        console.print(
            "[yellow]Warning:[/yellow] defaultProviderId does not match any provider; "
            "the built-in provider will be used"
        )


@cli.command(name="mock-catalog")
def mock_catalog_cmd() -> None:
    """List the development mock providers"""
    table = Table(title="Mock Providers (MOCK_PROVIDER_TYPE)")
    table.add_column("Type")
    table.add_column("Name")
    table.add_column("Model")
    table.add_column("Base URL")
    table.add_column("API Key Env")
    for key, entry in MOCK_CATALOG.items():
        table.add_row(
            key,
            entry.name,
            entry.model_id,
            entry.base_url or "-",
            entry.api_key_env or "-",
        )
    console.print(table)


@cli.command(name="version")
def version_cmd() -> None:
    """Show version information"""
    console.print(f"Nemoprefs version {__version__}")


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
