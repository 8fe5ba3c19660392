"""Subcommand modules for structmap.

Provides register_commands() which uses deferred imports to keep
``structmap --help`` fast. Every registered command, and the root group
itself, gets an eager ``--examples`` flag printing its entry in
:data:`EXAMPLES`.
"""

from __future__ import annotations

import click

ROOT = "structmap"

EXAMPLES: dict[str, str] = {
    ROOT: """\
  structmap generate -c mapping.yaml -x conversions.yaml
  structmap fields example.com/app/models User
  structmap -s ./structmap.toml -v generate -c mapping.yaml""",
    "generate": """\
  structmap generate -c mapping.yaml
  structmap generate -c mapping.yaml -x conversions.yaml
  structmap generate -c mapping.yaml --stdout --no-format
  structmap --json generate -c mapping.yaml --work-dir ./internal/dto""",
    "fields": """\
  structmap fields example.com/app/models User
  structmap fields . Order --work-dir ./internal/orders
  structmap --json fields github.com/acme/api/v2/dto CustomerDTO""",
}


def add_examples(command: click.Command, key: str) -> None:
    """Give *command* an ``--examples`` flag that prints ``EXAMPLES[key]``.

    The flag is eager, so it short-circuits before required options and
    arguments are validated.
    """
    text = EXAMPLES[key]

    def show(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n\n{text}")
        ctx.exit(0)

    command.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show,
            help="Show usage examples and exit.",
        )
    )


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands and their examples on the root group."""
    from structmap.commands.fields import fields
    from structmap.commands.generate import generate

    add_examples(cli, ROOT)
    for command in (generate, fields):
        add_examples(command, command.name or "")
        cli.add_command(command)
