"""CLI for inspecting, migrating and transferring TermLauncher configuration.

This script provides command-line access to the ConfigManager, the payload
validators and the update checker.
"""

import json
import sys
from pathlib import Path
from typing import Any

import click

from termlauncher.config.manager import ConfigManager
from termlauncher.config.migration import migrate_config
from termlauncher.config.models import LoggingConfig
from termlauncher.config.transfer import export_config, export_preview, import_config
from termlauncher.releases.update_checker import DEFAULT_GITHUB_REPO, check_for_updates
from termlauncher.system.path_resolver import PathResolver
from termlauncher.utils.structlog_configurator import configure_structlog
from termlauncher.validation import VALIDATORS, validate_payload

SECTIONS = ("terminals", "groups", "directories", "favorites", "settings")


def _fail(message: str) -> None:
    click.echo(click.style(f"✗ {message}", fg="red", bold=True), err=True)
    sys.exit(1)


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise click.BadParameter(f"{path} is not valid JSON: {e}") from e


def _summarize(document: dict[str, Any]) -> None:
    click.echo(f"  Terminals: {len(document.get('terminals') or [])}")
    click.echo(f"  Groups: {len(document.get('groups') or [])}")
    click.echo(f"  Directories: {len(document.get('directories') or [])}")
    click.echo(f"  Favorites: {len(document.get('favorites') or [])}")


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Configuration file (default: the per-user TermLauncher data directory)",
)
@click.option(
    "--platform",
    type=click.Choice(["darwin", "linux", "win32"]),
    help="Platform whose built-in terminals apply (default: the running platform)",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, platform: str | None, verbose: bool) -> None:
    """TermLauncher Configuration Management.

    Examples:
      # Show what a migration would change without writing it
      termlauncher-config migrate --dry-run

      # Export everything except settings
      termlauncher-config export backup.json --no-settings

      # Import, replacing directories instead of merging them
      termlauncher-config import backup.json --replace-directories
    """
    configure_structlog(LoggingConfig(level="DEBUG" if verbose else "WARNING"))

    ctx.ensure_object(dict)
    ctx.obj["path_resolver"] = PathResolver(platform, config_path=config_path)
    ctx.obj["config_manager"] = ConfigManager(ctx.obj["path_resolver"], platform=platform)
    ctx.obj["platform"] = platform


@cli.command()
@click.option("--dry-run", is_flag=True, help="Report the result without writing it")
@click.pass_obj
def migrate(obj: dict[str, Any], dry_run: bool) -> None:
    """Bring the configuration file up to the current format."""
    config_manager = obj["config_manager"]
    config_path = config_manager.config_path

    if not config_path.exists():
        click.echo(f"No configuration file at {config_path}, nothing to migrate")
        return

    try:
        raw = config_manager.read_raw()
    except ValueError as e:
        _fail(f"Configuration file is not valid JSON: {e}")
        return

    result = migrate_config(raw, config_manager.defaults)
    if not result.needs_save:
        click.echo(click.style("✓ Configuration is already up to date", fg="green"))
        return

    if dry_run:
        click.echo(click.style("Configuration would be migrated:", fg="yellow"))
        _summarize(result.document)
        return

    if not config_manager.save(result.document):
        _fail(f"Failed to write {config_path}")
        return

    click.echo(click.style("✓ Configuration migrated successfully!", fg="green", bold=True))
    _summarize(result.document)


@cli.command()
@click.argument("kind", type=click.Choice(sorted(VALIDATORS)))
@click.argument("payload")
def validate(kind: str, payload: str) -> None:
    """Validate a JSON payload.

    KIND: Validator to apply (e.g., safeUrl)

    PAYLOAD: JSON text of the value (e.g., '"https://example.com"')
    """
    try:
        value = json.loads(payload)
    except ValueError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="PAYLOAD") from e

    result = validate_payload(kind, value)
    if not result:
        _fail(f"Invalid {kind}: {result.error}")
        return
    click.echo(click.style(f"✓ Valid {kind}", fg="green"))


@cli.command("export")
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--terminals/--no-terminals", default=True, help="Include terminals")
@click.option("--groups/--no-groups", default=True, help="Include groups")
@click.option("--directories/--no-directories", default=True, help="Include directories")
@click.option("--favorites/--no-favorites", default=True, help="Include favorites")
@click.option("--settings/--no-settings", default=True, help="Include settings")
@click.pass_obj
def export_command(obj: dict[str, Any], output: Path, **sections: bool) -> None:
    """Export the configuration to a file.

    OUTPUT: Path of the export file to write
    """
    options = {f"include{name.capitalize()}": sections[name] for name in SECTIONS}
    export_data = export_config(obj["config_manager"].document, options)

    try:
        output.write_text(json.dumps(export_data, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as e:
        _fail(f"Error writing export: {e}")
        return

    click.echo(click.style(f"✓ Configuration exported to {output}", fg="green", bold=True))
    for name in SECTIONS:
        if name in export_data and name != "settings":
            click.echo(f"  {name.capitalize()}: {len(export_data[name])}")


@cli.command("import")
@click.argument(
    "input_path", metavar="INPUT", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option("--merge-terminals/--replace-terminals", default=True, help="Merge terminals")
@click.option("--merge-groups/--replace-groups", default=True, help="Merge groups")
@click.option("--merge-directories/--replace-directories", default=True, help="Merge directories")
@click.option("--merge-favorites/--replace-favorites", default=True, help="Merge favorites")
@click.option("--merge-settings/--replace-settings", default=True, help="Merge settings")
@click.pass_obj
def import_command(obj: dict[str, Any], input_path: Path, **merge_flags: bool) -> None:
    """Import a configuration export into the current configuration.

    INPUT: Path of a file written by the export command
    """
    config_manager = obj["config_manager"]
    options = {
        f"merge{name.removeprefix('merge_').capitalize()}": value
        for name, value in merge_flags.items()
    }

    import_data = _read_json(input_path)
    result = import_config(config_manager.document, import_data, options, obj["platform"])
    if not result.success:
        _fail(f"Import failed: {'; '.join(result.errors)}")
        return

    for error in result.errors:
        click.echo(click.style(f"Warning: {error}", fg="yellow"), err=True)

    if not config_manager.save(result.document):
        _fail(f"Failed to write {config_manager.config_path}")
        return

    click.echo(click.style("✓ Configuration imported successfully!", fg="green", bold=True))
    _summarize(result.document)


@cli.command()
@click.pass_obj
def preview(obj: dict[str, Any]) -> None:
    """Show what an export would contain."""
    summary = export_preview(obj["config_manager"].document)

    click.echo("Export preview:")
    click.echo(f"  Terminals: {summary.terminals_count}")
    click.echo(f"  Groups: {summary.groups_count}")
    click.echo(f"  Directories: {summary.directories_count}")
    click.echo(f"  Favorites: {summary.favorites_count}")
    click.echo(f"  Settings: {'yes' if summary.has_settings else 'no'}")


@cli.command("check-update")
@click.argument("current_version")
@click.option("--repo", default=DEFAULT_GITHUB_REPO, show_default=True, help="GitHub repository")
@click.option("--output-json", is_flag=True, help="Print the result as JSON")
def check_update(current_version: str, repo: str, output_json: bool) -> None:
    """Check GitHub for a newer release.

    CURRENT_VERSION: Version of the running build (e.g., 2.3.0)
    """
    status = check_for_updates(current_version, github_repo=repo)

    if output_json:
        click.echo(json.dumps(status.to_dict(), indent=2))
    elif status.error:
        click.echo(click.style(f"Update check failed: {status.error}", fg="yellow"), err=True)
    elif status.has_update:
        click.echo(click.style(f"Update available: {status.latest_version}", fg="green", bold=True))
        click.echo(f"  Release: {status.release_url}")
    else:
        click.echo(f"TermLauncher {current_version} is up to date")

    if status.error:
        sys.exit(1)


def main() -> None:
    """Entry point for the configuration management CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
