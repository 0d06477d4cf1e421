"""Root CLI group for subrules with global flags and command registration."""

from __future__ import annotations

from typing import Any

import click

from subrules import __version__
from subrules.commands import register_commands
from subrules.commands._context import AppContext
from subrules.config.settings import RulesSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="subrules")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Rule names only.")
@click.option("-v", "--verbose", is_flag=True, help="Show filters and debug logging.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("--subscriber", default=None, help="Subscriber name (overrides config).")
@click.option(
    "--version-override",
    default=None,
    help="Rule version as major.minor.patch (overrides config).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    subscriber: str | None,
    version_override: str | None,
) -> None:
    """subrules — subscription filter rule generator and reconciler."""
    sections: dict[str, Any] = {}
    if subscriber is not None:
        sections["subscriber"] = {"name": subscriber}
    if version_override is not None:
        sections["version"] = {"value": version_override}
    try:
        settings = RulesSettings.from_cli(
            config_path=config_path,
            json_output=json_output,
            quiet=quiet,
            verbose=verbose,
            log_json=log_json,
            **sections,
        )
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
