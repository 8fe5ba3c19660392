"""Root CLI group for structmap with global flags and command registration."""

from __future__ import annotations

import click
from pydantic import ValidationError

from structmap import __version__
from structmap.commands import register_commands
from structmap.commands._context import AppContext
from structmap.config.settings import StructmapSettings
from structmap.domain.errors import ConfigError


@click.group(name="structmap", invoke_without_command=True)
@click.version_option(version=__version__, prog_name="structmap")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logging.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option(
    "-s", "--settings", "settings_path", default=None, help="Override structmap.toml path."
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    settings_path: str | None,
) -> None:
    """structmap — generate Go struct mapping functions from YAML."""
    try:
        settings = StructmapSettings.from_cli(
            config_path=settings_path,
            json_output=json_output,
            quiet=quiet,
            verbose=verbose,
            log_json=log_json,
        )
    except ConfigError as exc:
        raise click.ClickException(exc.message) from exc
    except ValidationError as exc:
        msg = f"Invalid settings: {exc}"
        raise click.ClickException(msg) from exc
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
